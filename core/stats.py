"""Stats store implementation and progress overview."""

from .interfaces import StatsStore
from .models import WordStats
from .utils import round_half_up


class InMemoryStatsStore(StatsStore):
    """Dict-backed stats store, persisted as part of the user's state blob."""

    def __init__(self, stats: dict | None = None):
        self._stats = dict(stats or {})

    def get(self, word_id) -> WordStats | None:
        return self._stats.get(word_id)

    def set(self, word_id, stats: WordStats) -> None:
        self._stats[word_id] = stats

    def items(self) -> list:
        return list(self._stats.items())

    def __len__(self) -> int:
        return len(self._stats)

    def to_dict(self) -> dict:
        # JSON object keys are strings; ids are restored by from_dict
        return {str(word_id): stats.to_dict() for word_id, stats in self._stats.items()}

    @classmethod
    def from_dict(cls, data: dict, word_ids=None) -> 'InMemoryStatsStore':
        """Rebuild from to_dict() output.

        word_ids maps the stringified keys back to the vocabulary's ids so that
        integer ids survive a JSON round trip.
        """
        lookup = {str(word_id): word_id for word_id in (word_ids or [])}
        stats = {}
        for key, value in (data or {}).items():
            stats[lookup.get(key, key)] = WordStats.from_dict(value)
        return cls(stats)


def error_words(vocabulary: list, stats_store: StatsStore) -> list:
    """Vocabulary items currently owed a correction pass, in vocabulary order."""
    result = []
    for item in vocabulary:
        stats = stats_store.get(item.id)
        if stats and stats.is_in_error_set:
            result.append(item)
    return result


def overview(vocabulary: list, stats_store: StatsStore) -> dict:
    """Summarize progress over a vocabulary.

    A word counts as mastered once it has been studied and is not in the
    error set.
    """
    total = len(vocabulary)
    mastered = 0
    need_practice = 0
    for item in vocabulary:
        stats = stats_store.get(item.id)
        if not stats:
            continue
        if stats.is_in_error_set:
            need_practice += 1
        elif stats.is_studied:
            mastered += 1
    progress = (mastered / total) * 100 if total > 0 else 0
    return {
        'total_words': total,
        'mastered_words': mastered,
        'need_practice_words': need_practice,
        'progress_percentage': round_half_up(progress)
    }
