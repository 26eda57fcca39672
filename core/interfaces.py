"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod

from .models import WordStats


class StatsStore(ABC):
    """Per-word study statistics, read by the scorer and written by sessions."""

    @abstractmethod
    def get(self, word_id):
        """Get stats for a word. Returns WordStats or None if never studied."""
        pass

    @abstractmethod
    def set(self, word_id, stats) -> None:
        """Store stats for a word."""
        pass

    @abstractmethod
    def items(self) -> list:
        """Return (word_id, WordStats) pairs for every tracked word."""
        pass

    def get_or_create(self, word_id):
        """Get stats for a word, creating a fresh record on first study."""
        stats = self.get(word_id)
        if stats is None:
            stats = WordStats()
            self.set(word_id, stats)
        return stats

    def remove_from_error_set(self, word_id) -> bool:
        """Clear the error flag for a word. Returns True if it was set."""
        stats = self.get(word_id)
        if stats is None or not stats.is_in_error_set:
            return False
        stats.is_in_error_set = False
        self.set(word_id, stats)
        return True


class Storage(ABC):
    """Abstract base class for config and per-user state storage."""

    @abstractmethod
    def load_config(self) -> dict:
        """Load configuration. Returns config dict."""
        pass

    @abstractmethod
    def load_state(self, user_id: str = "default") -> dict | None:
        """Load state for a user. Returns state dict or None if not found."""
        pass

    @abstractmethod
    def save_state(self, state: dict, user_id: str = "default") -> None:
        """Save state for a user."""
        pass

    @abstractmethod
    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        pass

    @abstractmethod
    def user_exists(self, user_id: str) -> bool:
        """Check if a user has saved state."""
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """Delete a user's state. Returns True if something was deleted."""
        pass
