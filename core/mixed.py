"""Comprehensive (mixed-mode) question generation."""

import random

from .config import KIND_ORDER, ROOM_QUESTION_COUNT
from .models import SessionItem
from .prng import Prng


def partition_counts(total: int) -> dict:
    """Split a question budget over the kinds as evenly as possible."""
    total = max(0, total)
    base, remainder = divmod(total, len(KIND_ORDER))
    return {kind: base + (1 if index < remainder else 0)
            for index, kind in enumerate(KIND_ORDER)}


def build_mixed_questions(vocabulary: list, total: int, seed=None) -> list[dict]:
    """Generate `total` {kind, word_id} questions, interleaved.

    With a seed the result is fully reproducible. Words are redrawn while
    already used, up to 2 * len(vocabulary) times per slot, so repeats only
    happen once the budget outgrows the vocabulary.
    """
    if not vocabulary or total <= 0:
        return []
    rng = Prng(seed) if seed is not None else None
    size = len(vocabulary)

    def draw() -> int:
        if rng:
            return rng.next_int(0, size - 1)
        return random.randrange(size)

    questions = []
    used = set()
    for kind, count in partition_counts(total).items():
        for _ in range(count):
            index = draw()
            attempts = 0
            while vocabulary[index].id in used and attempts < 2 * size:
                index = draw()
                attempts += 1
            word_id = vocabulary[index].id
            used.add(word_id)
            questions.append({'kind': kind, 'word_id': word_id})

    if rng:
        return rng.shuffle(questions)
    shuffled = list(questions)
    random.shuffle(shuffled)
    return shuffled


def questions_to_items(vocabulary: list, questions: list[dict]) -> list[SessionItem]:
    by_id = {item.id: item for item in vocabulary}
    counts = {}
    items = []
    for question in questions:
        word = by_id.get(question['word_id'])
        if word is None:
            continue
        occurrence = counts.get(word.id, 0)
        counts[word.id] = occurrence + 1
        items.append(SessionItem.for_word(word, question['kind'], occurrence=occurrence))
    return items


def build_mixed_session(vocabulary: list, total: int, seed=None) -> list[SessionItem]:
    return questions_to_items(vocabulary, build_mixed_questions(vocabulary, total, seed))


def build_room_session(vocabulary: list, room_code: str) -> list[SessionItem]:
    """Friend battle: a fixed-size mixed session seeded by the room code."""
    return build_mixed_session(vocabulary, ROOM_QUESTION_COUNT, seed=room_code)


def validate_room_code(room_code: str | None) -> str:
    """Return the trimmed room code, raising ValueError unless it is all digits."""
    code = (room_code or '').strip()
    if not code:
        raise ValueError("Room code is required")
    if not code.isdigit() or not code.isascii():
        raise ValueError("Room code may only contain digits")
    return code


def build_retry_questions(errors: list[dict], rng=None) -> list[dict]:
    """One question per distinct missed word, each with a randomly drawn kind."""
    rng = rng or random
    questions = []
    seen = set()
    for error in errors:
        word_id = error['word_id']
        if word_id in seen:
            continue
        seen.add(word_id)
        questions.append({'kind': rng.choice(KIND_ORDER), 'word_id': word_id})
    return questions
