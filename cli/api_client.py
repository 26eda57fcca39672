"""REST API client for lexidrill server."""

import requests


class LexidrillAPIClient:
    """Client for communicating with the lexidrill REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        if data is None:
            data = {}
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def get_status(self) -> dict:
        """Get progress for the active word book."""
        return self._get("/api/status")

    def upload_vocabulary(self, words: list, book_name: str) -> dict:
        """Replace the active word book."""
        return self._post("/api/vocabulary", {'words': words, 'book_name': book_name})

    def start_session(self, kind: str, requeue: str = 'fixed') -> dict:
        """Start a single-kind session."""
        return self._post("/api/session/start", {'kind': kind, 'requeue': requeue})

    def start_mixed(self, count: int, seed: str = None) -> dict:
        """Start a comprehensive session."""
        return self._post("/api/session/mixed", {'count': count, 'seed': seed})

    def join_room(self, room_code: str) -> dict:
        """Start the shared session for a room."""
        return self._post(f"/api/room/{room_code}")

    def submit_answer(self, answer: str) -> dict:
        """Submit an answer to the current question."""
        return self._post("/api/session/answer", {'answer': answer})

    def forgot(self) -> dict:
        """Reveal the answer to the current question."""
        return self._post("/api/session/forgot")

    def next_question(self) -> dict:
        return self._post("/api/session/next")

    def previous_question(self) -> dict:
        return self._post("/api/session/previous")

    def review_errors(self) -> dict:
        """Restart the session over its missed words."""
        return self._post("/api/session/review")

    def get_summary(self) -> dict:
        return self._get("/api/session/summary")

    def get_error_words(self) -> dict:
        return self._get("/api/error-words")
