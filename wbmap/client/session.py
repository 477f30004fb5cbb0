"""Edit token cache shared by all threads using one client."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class EditTokenCache:
    """Fetches the CSRF edit token on first use and keeps it for the session.

    ``fetch`` is only ever called by one thread at a time, and at most once
    unless it fails. Tokens are never refreshed.
    """

    def __init__(self, fetch: Callable[[], str]) -> None:
        self._fetch = fetch
        self._token: str | None = None
        self._lock = threading.Lock()

    @property
    def token(self) -> str | None:
        """The cached token, without fetching one."""
        return self._token

    def set(self, token: str) -> None:
        """Install a token obtained elsewhere."""
        with self._lock:
            self._token = token

    def get(self) -> str:
        token = self._token
        if token is not None:
            return token

        with self._lock:
            # at start of day every thread races for the token, so bail out
            # if another one won while we waited for the lock
            if self._token is None:
                logger.debug("Fetching edit token")
                self._token = self._fetch()
            return self._token
