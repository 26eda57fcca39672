"""File-based storage implementation."""

import json
import logging
import os

from core.interfaces import Storage

logger = logging.getLogger(__name__)

STATE_PREFIX = 'lexidrill_state'


class FileStorage(Storage):
    """Stores each user's state as a JSON file in a directory."""

    def __init__(self, config_file: str = None, state_dir: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/lexidrill/config.json')
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.environ.get('LEXIDRILL_STATE_DIR') or project_root

    def _get_state_file(self, user_id: str) -> str:
        """Get state file path for a user."""
        if user_id == "default":
            return os.path.join(self.state_dir, f'{STATE_PREFIX}.json')
        return os.path.join(self.state_dir, f'{STATE_PREFIX}_{user_id}.json')

    def load_config(self) -> dict:
        """Load the optional config file. Returns {} when it does not exist."""
        if not os.path.exists(self.config_file):
            return {}
        with open(self.config_file, 'r') as f:
            return json.load(f)

    def load_state(self, user_id: str = "default") -> dict | None:
        state_file = self._get_state_file(user_id)
        if os.path.exists(state_file):
            try:
                with open(state_file, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Error loading state for {user_id}: {e}")
                return None
        return None

    def save_state(self, state: dict, user_id: str = "default") -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        state_file = self._get_state_file(user_id)
        with open(state_file, 'w', encoding='utf-8') as f:
            json.dump(state, f, indent=2, ensure_ascii=False)

    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        users = []
        if os.path.exists(self.state_dir):
            for filename in os.listdir(self.state_dir):
                if filename == f'{STATE_PREFIX}.json':
                    users.append('default')
                elif filename.startswith(f'{STATE_PREFIX}_') and filename.endswith('.json'):
                    users.append(filename[len(STATE_PREFIX) + 1:-5])
        return sorted(users)

    def user_exists(self, user_id: str) -> bool:
        """Check if a user exists."""
        return os.path.exists(self._get_state_file(user_id))

    def delete_user(self, user_id: str) -> bool:
        """Delete a user's state file."""
        state_file = self._get_state_file(user_id)
        if os.path.exists(state_file):
            os.remove(state_file)
            return True
        return False
