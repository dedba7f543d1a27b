"""Login attempt repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

from authhost.domain.model.login_attempt import LoginAttemptWindow
from authhost.domain.value import Username


class LoginAttemptRepository(ABC):
    """Per-username attempt counters shared by all requests."""

    @abstractmethod
    async def get(self, username: Username) -> Optional[LoginAttemptWindow]:
        """Current counter for a username, if any."""
        pass

    @abstractmethod
    async def reserve_attempt(
        self, username: Username, now: datetime, window: timedelta
    ) -> int:
        """Atomically count an attempt and return the attempts in the window.

        Starts a new window when none is open at ``now``. Must be a single
        storage operation, not read-then-write: the returned count is what
        the caller checks against the limit.
        """
        pass

    @abstractmethod
    async def reset(self, username: Username) -> None:
        """Clear the counter after a successful verification."""
        pass
