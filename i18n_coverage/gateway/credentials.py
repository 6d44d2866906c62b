"""Rotating pool of API credentials with quota bookkeeping."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..errors import RateLimitedError
from ..utils.logger_utils import LoggerUtils

logger = LoggerUtils.get_logger(__name__)

# Seconds an exhausted credential rests when the response names no reset time
DEFAULT_COOLDOWN = 60.0


@dataclass
class Credential:
    """One API token and what we last learned about its quota."""

    token: Optional[str]          # None for unauthenticated access
    index: int
    remaining: Optional[int] = None  # unknown until the first response
    limit: Optional[int] = None
    reset_at: Optional[float] = None  # epoch seconds

    @property
    def label(self) -> str:
        return f"token {self.index + 1}" if self.token else "anonymous"


class CredentialPool:
    """
    Round-robin credential rotation shared by all in-flight requests.

    acquire() prefers the current credential while its remaining budget is
    above the low-water mark, then rotates to the next credential that is.
    If none is above the mark, the credential with the largest non-zero budget
    is used. Only when every credential is known to be at zero (and not yet
    reset) does acquire() raise RateLimitedError.

    The current index and quota fields are only changed under the lock.
    """

    def __init__(
        self,
        tokens: List[str],
        low_threshold: int = 50,
        clock: Callable[[], float] = time.time,
    ):
        tokens = [t for t in tokens if t]
        self.credentials: List[Credential] = (
            [Credential(token=t, index=i) for i, t in enumerate(tokens)]
            if tokens
            else [Credential(token=None, index=0)]
        )
        self.low_threshold = low_threshold
        self._clock = clock
        self._current = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.credentials)

    @property
    def is_authenticated(self) -> bool:
        return self.credentials[0].token is not None

    @property
    def current(self) -> Credential:
        with self._lock:
            return self.credentials[self._current]

    def acquire(self) -> Credential:
        """Pick the credential for the next request, rotating if needed."""
        with self._lock:
            now = self._clock()
            count = len(self.credentials)
            for cred in self.credentials:
                self._refresh_if_reset(cred, now)

            for offset in range(count):
                index = (self._current + offset) % count
                cred = self.credentials[index]
                if cred.remaining is None or cred.remaining > self.low_threshold:
                    if index != self._current:
                        logger.info(
                            "Rotated to %s/%d - previous credential low on quota",
                            cred.label, count,
                        )
                        self._current = index
                    return cred

            usable = [c for c in self.credentials if c.remaining and c.remaining > 0]
            if usable:
                best = max(usable, key=lambda c: c.remaining)
                self._current = best.index
                logger.warning(
                    "All credentials low on quota - using %s (%d remaining)",
                    best.label, best.remaining,
                )
                return best

            resets = [c.reset_at for c in self.credentials if c.reset_at]
            reset_at = min(resets) if resets else None
            logger.warning("All %d credential(s) exhausted", count)
            raise RateLimitedError("All credentials exhausted", reset_at=reset_at)

    def record(
        self,
        cred: Credential,
        remaining: Optional[int],
        reset_at: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> None:
        """Update quota bookkeeping from a response."""
        with self._lock:
            if remaining is not None:
                cred.remaining = remaining
            if reset_at is not None:
                cred.reset_at = reset_at
            if limit is not None:
                cred.limit = limit
            if remaining is not None and remaining <= self.low_threshold:
                logger.warning("Low rate limit on %s: %d requests remaining", cred.label, remaining)

    def mark_exhausted(
        self,
        cred: Credential,
        reset_at: Optional[float] = None,
        retry_after: Optional[float] = None,
    ) -> float:
        """
        Mark a credential as out of quota and move past it.

        Without an explicit reset time the credential becomes usable again
        after retry_after seconds, or DEFAULT_COOLDOWN when that is unknown
        too. Returns the reset time that was recorded.
        """
        with self._lock:
            cred.remaining = 0
            if reset_at is None:
                delay = retry_after if retry_after is not None else DEFAULT_COOLDOWN
                reset_at = self._clock() + delay
            cred.reset_at = reset_at
            if self._current == cred.index:
                self._current = (cred.index + 1) % len(self.credentials)
        logger.warning("Request quota exhausted for %s/%d", cred.label, len(self.credentials))
        return reset_at

    def _refresh_if_reset(self, cred: Credential, now: float) -> None:
        if cred.reset_at is not None and cred.reset_at <= now:
            cred.remaining = None
            cred.reset_at = None
