"""Session state machine: answering, navigation and error requeue."""

import logging
import random

from .config import (
    REQUEUE_INTERVAL, REQUEUE_RANDOM_CHOICES, KIND_ORDER, KIND_SPELLING,
    MODE_COMPREHENSIVE
)
from .models import AnswerRecord, SessionItem
from .utils import normalize_answer, round_half_up, utcnow

logger = logging.getLogger(__name__)


class RequeuePolicy:
    """Decides on which answered-count a missed word is reinserted."""

    def is_due(self, answered_count: int) -> bool:
        raise NotImplementedError


class FixedInterval(RequeuePolicy):
    """Requeue every `interval` answered questions."""

    def __init__(self, interval: int = REQUEUE_INTERVAL):
        self.interval = interval

    def is_due(self, answered_count: int) -> bool:
        return answered_count % self.interval == 0


class RandomInterval(RequeuePolicy):
    """Draw a fresh interval from `choices` at every check."""

    def __init__(self, choices=REQUEUE_RANDOM_CHOICES, rng=None):
        self.choices = tuple(choices)
        self.rng = rng or random

    def is_due(self, answered_count: int) -> bool:
        return answered_count % self.rng.choice(self.choices) == 0


def check_answer(item: SessionItem, given: str | None) -> tuple[bool, str]:
    """Match an answer against a question. Returns (is_correct, accepted_answer).

    Typed answers compare case-insensitively; choice answers must be one of
    the expected options. A question without a usable answer never matches.
    """
    expected = [answer for answer in item.expected_answers if answer and answer.strip()]
    if not expected:
        return (False, '')
    if given is None:
        return (False, expected[0])
    if item.is_free_typed:
        target = normalize_answer(given)
        for answer in expected:
            if normalize_answer(answer) == target:
                return (True, answer)
        return (False, expected[0])
    if given in expected:
        return (True, given)
    return (False, expected[0])


class SessionState:
    """Progress through one pass over a list of questions.

    The session writes study results into the caller's stats store, keeps one
    answer record per word, and reinserts missed words after the current
    position as the requeue policy allows. Comprehensive (mixed-mode)
    sessions and review passes never requeue.
    """

    def __init__(self, items: list[SessionItem], vocabulary, stats_store,
                 mode: str = KIND_SPELLING, review_pass: bool = False,
                 requeue_policy: RequeuePolicy = None, allow_resubmit: bool = False,
                 now=None):
        self.vocabulary = {item.id: item for item in vocabulary}
        self.stats_store = stats_store
        self.mode = mode
        self.requeue_policy = requeue_policy or FixedInterval()
        self.allow_resubmit = allow_resubmit
        self.reset(items, review_pass=review_pass, now=now)

    def reset(self, items: list[SessionItem], review_pass: bool = False, now=None) -> None:
        """Start a new pass. Word stats are kept; everything else is cleared."""
        self.items = list(items)
        self.review_pass = review_pass
        self.cursor = 0
        self.correct_count = 0
        self.incorrect_count = 0
        self.answered_count = 0
        self.error_requeue = []
        self.requeue_kinds = []
        self.requeued_count = 0
        self.answers = {}
        self.errors = []
        self.started_at = now or utcnow()
        self.finished_at = None

    @property
    def is_comprehensive(self) -> bool:
        return self.mode == MODE_COMPREHENSIVE

    def is_complete(self) -> bool:
        return self.cursor >= len(self.items)

    def current_item(self) -> SessionItem | None:
        if self.is_complete():
            return None
        return self.items[self.cursor]

    def answer_for_current(self) -> AnswerRecord | None:
        """Stored answer to show for the current question, if any.

        A later occurrence of the word never shows an earlier occurrence's
        answer, and a requeued occurrence only shows an answer given to it.
        """
        item = self.current_item()
        if item is None:
            return None
        record = self.answers.get(item.word_id)
        if record is None:
            return None
        if record.occurrence < item.occurrence:
            return None
        if item.is_requeued and record.occurrence != item.occurrence:
            return None
        return record

    def submit_answer(self, given: str | None, now=None) -> AnswerRecord | None:
        """Grade the current question and record the result."""
        item = self.current_item()
        if item is None:
            return None
        if not self.allow_resubmit:
            existing = self.answer_for_current()
            if existing is not None:
                return existing
        is_correct, accepted = check_answer(item, given)
        return self._record(item, is_correct, given, accepted, now=now)

    def mark_forgotten(self, now=None) -> AnswerRecord | None:
        """Reveal the answer to the current question, counting it as a miss."""
        item = self.current_item()
        if item is None:
            return None
        if not self.allow_resubmit:
            existing = self.answer_for_current()
            if existing is not None:
                return existing
        _, accepted = check_answer(item, None)
        return self._record(item, False, None, accepted, now=now, is_forgotten=True)

    def _record(self, item: SessionItem, is_correct: bool, given, accepted: str,
                now=None, is_forgotten: bool = False) -> AnswerRecord:
        now = now or utcnow()
        if is_correct:
            self.correct_count += 1
        else:
            self.incorrect_count += 1

        stats = self.stats_store.get_or_create(item.word_id)
        stats.record(is_correct, now)
        if is_correct and self.review_pass:
            stats.is_in_error_set = False
        self.stats_store.set(item.word_id, stats)

        record = AnswerRecord(is_correct, given, accepted, item.kind,
                              occurrence=item.occurrence, is_forgotten=is_forgotten)
        self.answers[item.word_id] = record

        if not is_correct:
            self.errors.append({
                'word_id': item.word_id,
                'kind': item.kind,
                'correct_answer': accepted,
                'user_answer': given,
                'timestamp': now.isoformat()
            })
            word = self.vocabulary.get(item.word_id)
            if word is not None and not self.review_pass and not self.is_comprehensive:
                self.error_requeue.append(word)
                self.requeue_kinds.append(item.kind)
        return record

    def advance(self) -> None:
        """Move to the next question, reinserting a missed word when due."""
        if self.is_complete():
            return
        self.answered_count += 1
        if (not self.is_comprehensive and self.error_requeue
                and self.requeue_policy.is_due(self.answered_count)):
            word = self.error_requeue.pop(0)
            kind = self.requeue_kinds.pop(0)
            occurrence = 1 + max((i.occurrence for i in self.items if i.word_id == word.id),
                                 default=-1)
            requeued = SessionItem.for_word(word, kind, is_requeued=True, occurrence=occurrence)
            self.items.insert(self.cursor + 1, requeued)
            self.requeued_count += 1
            logger.debug(f"Requeued word {word.id} at position {self.cursor + 1}")
        self.cursor += 1
        if self.is_complete() and self.finished_at is None:
            self.finished_at = utcnow()

    def retreat(self) -> None:
        """Go back one question. Counters are untouched."""
        if self.is_complete():
            return
        if self.cursor > 0:
            self.cursor -= 1

    def review_errors(self, now=None) -> bool:
        """Restart as a review pass over this session's words still in the error set.

        Returns False (leaving the session alone) when there is nothing to review.
        """
        seen = set()
        review_items = []
        for item in self.items:
            if item.word_id in seen:
                continue
            stats = self.stats_store.get(item.word_id)
            if stats and stats.is_in_error_set:
                seen.add(item.word_id)
                review_items.append(SessionItem(item.word_id, item.display_prompt,
                                                item.expected_answers, item.kind))
        if not review_items:
            return False
        self.reset(review_items, review_pass=True, now=now)
        return True

    def error_distribution(self) -> dict:
        distribution = {kind: 0 for kind in KIND_ORDER}
        for error in self.errors:
            if error['kind'] in distribution:
                distribution[error['kind']] += 1
        return distribution

    def summary(self, now=None) -> dict:
        """Result figures for the session so far."""
        total = len(self.items)
        answered = self.correct_count + self.incorrect_count
        end = self.finished_at or now or utcnow()
        kind_counts = {kind: 0 for kind in KIND_ORDER}
        for item in self.items:
            if item.kind in kind_counts:
                kind_counts[item.kind] += 1
        return {
            'mode': self.mode,
            'review_pass': self.review_pass,
            'total': total,
            'correct': self.correct_count,
            'incorrect': self.incorrect_count,
            'accuracy': round_half_up(self.correct_count / answered * 100) if answered else 0,
            'score': round_half_up(self.correct_count / total * 100) if total else 0,
            'kind_counts': kind_counts,
            'error_distribution': self.error_distribution(),
            'duration_seconds': int((end - self.started_at).total_seconds()),
            'is_complete': self.is_complete()
        }
