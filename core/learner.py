"""Per-user persistent state: the active word book and its study stats."""

from .models import VocabularyItem
from .stats import InMemoryStatsStore
from .vocabulary import get_default_vocabulary

DEFAULT_BOOK_NAME = 'default'


class Learner:
    """A user's word book plus per-word statistics, saved as one state blob."""

    def __init__(self, vocabulary: list[VocabularyItem] | None = None,
                 stats: InMemoryStatsStore | None = None,
                 book_name: str = DEFAULT_BOOK_NAME):
        self.vocabulary = vocabulary if vocabulary is not None else get_default_vocabulary()
        self.stats = stats if stats is not None else InMemoryStatsStore()
        self.book_name = book_name

    def find_word(self, word_id) -> VocabularyItem | None:
        for item in self.vocabulary:
            if item.id == word_id:
                return item
        return None

    def replace_vocabulary(self, vocabulary: list[VocabularyItem], book_name: str) -> None:
        """Switch word books. Stats for the previous book are dropped."""
        self.vocabulary = vocabulary
        self.stats = InMemoryStatsStore()
        self.book_name = book_name

    def to_dict(self) -> dict:
        return {
            'book_name': self.book_name,
            'vocabulary': [item.to_dict() for item in self.vocabulary],
            'stats': self.stats.to_dict()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Learner':
        if 'vocabulary' in data:
            vocabulary = [VocabularyItem.from_dict(v) for v in data['vocabulary']]
        else:
            vocabulary = get_default_vocabulary()
        stats = InMemoryStatsStore.from_dict(data.get('stats', {}),
                                             word_ids=[item.id for item in vocabulary])
        return cls(vocabulary, stats, data.get('book_name', DEFAULT_BOOK_NAME))
