"""In-memory login attempt repository for testing."""

from datetime import datetime, timedelta
from typing import Optional

from authhost.domain.model import LoginAttemptWindow
from authhost.domain.repository.login_attempt import LoginAttemptRepository
from authhost.domain.value import Username


class InMemoryLoginAttemptRepository(LoginAttemptRepository):
    """In-memory implementation of LoginAttemptRepository."""

    def __init__(self) -> None:
        self._windows: dict[Username, LoginAttemptWindow] = {}

    async def get(self, username: Username) -> Optional[LoginAttemptWindow]:
        """Current counter for a username."""
        return self._windows.get(username)

    async def reserve_attempt(
        self, username: Username, now: datetime, window: timedelta
    ) -> int:
        """Count an attempt; no await between read and write."""
        current = self._windows.get(username)
        if current is None or not current.is_open(now, window):
            current = LoginAttemptWindow(
                username=username, attempts=1, window_started_at=now
            )
        else:
            current = current.model_copy(update={"attempts": current.attempts + 1})
        self._windows[username] = current
        return current.attempts

    async def reset(self, username: Username) -> None:
        """Clear the counter."""
        self._windows.pop(username, None)
