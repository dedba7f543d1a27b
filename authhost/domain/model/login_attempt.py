"""Attempt counter for the lockout policy."""

from datetime import datetime, timedelta

from authhost.domain.model.common import DomainModel
from authhost.domain.value import Username


class LoginAttemptWindow(DomainModel):
    """Attempts for one username since its last successful verification.

    The window opens at the first attempt and closes ``window`` later; an
    attempt after the window closes starts a new one. An attempt is counted
    before its credential is checked, and a success clears the counter.
    """

    username: Username
    attempts: int = 0
    window_started_at: datetime

    def is_open(self, now: datetime, window: timedelta) -> bool:
        return now < self.window_started_at + window
