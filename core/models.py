"""Domain models for lexidrill."""

from .config import KIND_SPELLING, KIND_MEANING_CHOICE
from .utils import parse_timestamp, format_timestamp


class VocabularyItem:
    """A word as loaded from a word book. Read-only to the engine."""

    __slots__ = ('id', 'answer_forms', 'prompt', 'prompt_forms', 'related_forms')

    def __init__(self, id, answer_forms, prompt: str,
                 prompt_forms=None, related_forms=None):
        self.id = id
        self.answer_forms = tuple(answer_forms)
        self.prompt = prompt
        self.prompt_forms = tuple(prompt_forms) if prompt_forms else (prompt,)
        self.related_forms = tuple(related_forms or ())

    @property
    def canonical(self) -> str:
        """Display form of the answer (first accepted form)."""
        return self.answer_forms[0] if self.answer_forms else ''

    def __repr__(self) -> str:
        return f"VocabularyItem({self.id!r}, {self.canonical!r})"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'answer_forms': list(self.answer_forms),
            'prompt': self.prompt,
            'prompt_forms': list(self.prompt_forms),
            'related_forms': list(self.related_forms)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'VocabularyItem':
        return cls(
            data['id'],
            data.get('answer_forms', []),
            data.get('prompt', ''),
            prompt_forms=data.get('prompt_forms'),
            related_forms=data.get('related_forms')
        )


class WordStats:
    """Study history for one word. Persists across sessions."""

    def __init__(self, times_studied: int = 0, times_wrong: int = 0,
                 last_studied_at=None, last_wrong_at=None,
                 is_in_error_set: bool = False):
        self.times_studied = times_studied
        self.times_wrong = times_wrong
        self.last_studied_at = parse_timestamp(last_studied_at)
        self.last_wrong_at = parse_timestamp(last_wrong_at)
        self.is_in_error_set = is_in_error_set

    @property
    def is_studied(self) -> bool:
        return self.times_studied > 0

    def record(self, is_correct: bool, now) -> None:
        """Count one study event."""
        self.times_studied += 1
        self.last_studied_at = now
        if not is_correct:
            self.times_wrong += 1
            self.last_wrong_at = now
            self.is_in_error_set = True

    def to_dict(self) -> dict:
        return {
            'times_studied': self.times_studied,
            'times_wrong': self.times_wrong,
            'last_studied_at': format_timestamp(self.last_studied_at),
            'last_wrong_at': format_timestamp(self.last_wrong_at),
            'is_in_error_set': self.is_in_error_set
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordStats':
        return cls(
            times_studied=data.get('times_studied', 0),
            times_wrong=data.get('times_wrong', 0),
            last_studied_at=data.get('last_studied_at'),
            last_wrong_at=data.get('last_wrong_at'),
            is_in_error_set=data.get('is_in_error_set', False)
        )


class ScoredWord:
    """A vocabulary item with its scheduling weight for one session."""

    def __init__(self, item: VocabularyItem, priority: float, probability: float = 0.0):
        self.item = item
        self.priority = priority
        self.probability = probability


class SessionItem:
    """One question slot in a session's working list."""

    def __init__(self, word_id, display_prompt: str, expected_answers,
                 kind: str, is_requeued: bool = False, occurrence: int = 0):
        self.word_id = word_id
        self.display_prompt = display_prompt
        self.expected_answers = tuple(expected_answers)
        self.kind = kind
        self.is_requeued = is_requeued
        self.occurrence = occurrence

    @classmethod
    def for_word(cls, item: VocabularyItem, kind: str,
                 is_requeued: bool = False, occurrence: int = 0) -> 'SessionItem':
        """Build the question for a word according to its kind."""
        if kind == KIND_MEANING_CHOICE:
            prompt = item.canonical
            expected = (item.prompt,) + tuple(f for f in item.prompt_forms if f != item.prompt)
        else:
            prompt = item.prompt
            expected = item.answer_forms
        return cls(item.id, prompt, expected, kind,
                   is_requeued=is_requeued, occurrence=occurrence)

    @property
    def is_free_typed(self) -> bool:
        return self.kind == KIND_SPELLING

    def to_dict(self) -> dict:
        return {
            'word_id': self.word_id,
            'display_prompt': self.display_prompt,
            'expected_answers': list(self.expected_answers),
            'kind': self.kind,
            'is_requeued': self.is_requeued,
            'occurrence': self.occurrence
        }


class AnswerRecord:
    """The stored outcome of the latest answer for a word."""

    def __init__(self, is_correct: bool, given_answer: str | None,
                 accepted_answer: str, kind: str, occurrence: int = 0,
                 is_forgotten: bool = False):
        self.is_correct = is_correct
        self.given_answer = given_answer
        self.accepted_answer = accepted_answer
        self.kind = kind
        self.occurrence = occurrence
        self.is_forgotten = is_forgotten

    def to_dict(self) -> dict:
        return {
            'is_correct': self.is_correct,
            'given_answer': self.given_answer,
            'accepted_answer': self.accepted_answer,
            'kind': self.kind,
            'occurrence': self.occurrence,
            'is_forgotten': self.is_forgotten
        }
