import threading
from typing import Optional

from trackfinder.crosscutting.logging import mask_secret
from trackfinder.domain.errors import ValidationError


class SessionCredential:
    """Provider API key held in process memory for the running session only.

    Nothing here reads from or writes to disk or the environment.
    """

    def __init__(self, key: Optional[str] = None):
        self._lock = threading.Lock()
        self._key: Optional[str] = None
        if key:
            self.set(key)

    def set(self, key: str) -> None:
        key = (key or '').strip()
        if not key:
            raise ValidationError('Please enter your Gemini API key')
        with self._lock:
            self._key = key

    def clear(self) -> None:
        with self._lock:
            self._key = None

    def is_set(self) -> bool:
        with self._lock:
            return self._key is not None

    def require(self) -> str:
        """Return the key or raise ValidationError when none was entered."""
        with self._lock:
            key = self._key
        if not key:
            raise ValidationError('Please enter your Gemini API key')
        return key

    def __repr__(self) -> str:
        with self._lock:
            return f"SessionCredential({mask_secret(self._key) if self._key else '<unset>'})"

    __str__ = __repr__
