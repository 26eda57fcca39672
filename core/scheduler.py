"""Priority scoring and the priority-weighted shuffle that orders a session."""

import random

from .config import (
    NEVER_STUDIED_BONUS, ERROR_WEIGHT, ERROR_RECENCY_MAX, ERROR_RECENCY_DECAY,
    EXPOSURE_MAX, EXPOSURE_DECAY, INACCURACY_WEIGHT, PROFICIENCY_WEIGHT,
    MEMORY_CHECKPOINTS, MEMORY_CHECKPOINT_WINDOW, MEMORY_CHECKPOINT_BONUS,
    HARD_ERROR_COUNT, MEDIUM_ERROR_COUNT, KIND_SPELLING
)
from .models import ScoredWord, SessionItem, WordStats
from .utils import round_half_up, utcnow, days_between, hours_between


def accuracy(stats: WordStats) -> float | None:
    """Fraction of studies answered correctly, or None if never studied."""
    if stats.times_studied <= 0:
        return None
    return (stats.times_studied - stats.times_wrong) / stats.times_studied


def proficiency(stats: WordStats | None) -> int:
    """Accuracy as a 0-100 percentage (0 for an unstudied word)."""
    if stats is None:
        return 0
    acc = accuracy(stats)
    if acc is None:
        return 0
    return min(100, round_half_up(acc * 100))


def difficulty_level(stats: WordStats | None) -> str:
    errors = stats.times_wrong if stats else 0
    if errors >= HARD_ERROR_COUNT:
        return 'hard'
    if errors >= MEDIUM_ERROR_COUNT:
        return 'medium'
    return 'easy'


def memory_checkpoint_bonus(last_studied_at, now) -> float:
    """Flat bonus when the last study sits on a forgetting-curve checkpoint."""
    if last_studied_at is None:
        return 0
    hours = hours_between(last_studied_at, now)
    for point in MEMORY_CHECKPOINTS:
        if abs(hours - point) < MEMORY_CHECKPOINT_WINDOW:
            return MEMORY_CHECKPOINT_BONUS
    return 0


def score_word(item, stats: WordStats | None, now=None) -> float:
    """Compute the unnormalized scheduling priority of a word.

    Every term is non-negative for consistent stats (times_wrong never above
    times_studied), so the sum is too.
    """
    if stats is None:
        stats = WordStats()
    now = now or utcnow()
    studied = stats.times_studied
    priority = 0.0

    if studied == 0:
        priority += NEVER_STUDIED_BONUS
    priority += stats.times_wrong * ERROR_WEIGHT

    if stats.last_wrong_at is not None:
        days = days_between(stats.last_wrong_at, now)
        priority += max(0, ERROR_RECENCY_MAX - days * ERROR_RECENCY_DECAY)

    priority += max(0, EXPOSURE_MAX - studied * EXPOSURE_DECAY)

    acc = accuracy(stats)
    if acc is not None:
        priority += (1 - acc) * INACCURACY_WEIGHT

    priority += (100 - proficiency(stats)) * PROFICIENCY_WEIGHT
    priority += memory_checkpoint_bonus(stats.last_studied_at, now)
    return priority


def score_vocabulary(vocabulary: list, stats_store, now=None) -> list[ScoredWord]:
    now = now or utcnow()
    return [ScoredWord(item, score_word(item, stats_store.get(item.id), now))
            for item in vocabulary]


def assign_probabilities(scored: list[ScoredWord]) -> list[ScoredWord]:
    """Normalize priorities into probabilities (uniform if they sum to zero)."""
    if not scored:
        return scored
    total = sum(word.priority for word in scored)
    for word in scored:
        word.probability = word.priority / total if total > 0 else 1 / len(scored)
    return scored


def select_by_probability(candidates: list[ScoredWord], rng=None) -> int:
    """Pick a candidate index by cumulative probability mass."""
    r = (rng or random).random()
    cumulative = 0.0
    for index, word in enumerate(candidates):
        cumulative += word.probability
        if r <= cumulative:
            return index
    return 0


def weighted_shuffle(scored: list[ScoredWord], rng=None) -> list[ScoredWord]:
    """Draw every word without replacement, weighted by probability.

    Probabilities are not renormalized as the pool shrinks; the tail fallback
    to the first remaining candidate covers the missing mass. Every input word
    appears in the output exactly once.
    """
    assign_probabilities(scored)
    pool = list(scored)
    ordered = []
    while pool:
        ordered.append(pool.pop(select_by_probability(pool, rng)))
    return ordered


def score_and_build_session(vocabulary: list, stats_store, kind: str = KIND_SPELLING,
                            rng=None, now=None) -> list[SessionItem]:
    """Order a vocabulary for a single-kind session by study priority."""
    ordered = weighted_shuffle(score_vocabulary(vocabulary, stats_store, now), rng)
    return [SessionItem.for_word(word.item, kind) for word in ordered]


def build_review_session(vocabulary: list, stats_store,
                         kind: str = KIND_SPELLING) -> list[SessionItem]:
    """Session over every word currently in the error set, in vocabulary order."""
    items = []
    for item in vocabulary:
        stats = stats_store.get(item.id)
        if stats and stats.is_in_error_set:
            items.append(SessionItem.for_word(item, kind))
    return items
