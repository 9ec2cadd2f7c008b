"""Client secret generation and send-attempt counting for three-pid sessions."""

import threading
import uuid


class CorrelationSecretProvider:
    """
    Generates the client secret binding a requestToken call to its confirmation.

    The homeserver only accepts a confirmation whose client secret matches
    the one used to open the three-pid session, so a flow asks for a secret
    exactly once and keeps it for its whole lifetime.
    """

    def generate(self) -> str:
        """
        Generate a new client secret.

        Returns:
            Random UUID4 string (valid under the client_secret grammar [0-9a-zA-Z.=_-])
        """
        return str(uuid.uuid4())


class AttemptCounter:
    """Monotonic send-attempt counter with atomic read-then-increment."""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"start must be >= 0, got {start}")
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        """
        Return the current value and increment the stored one.

        Returns:
            Value to send with this attempt
        """
        with self._lock:
            value = self._value
            self._value += 1
            return value

    @property
    def value(self) -> int:
        """Value the next attempt will use."""
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"AttemptCounter(value={self.value})"
