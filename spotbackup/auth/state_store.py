"""Time-bounded store of pending OAuth login attempts.

Each entry maps an opaque state token to the PKCE verifier of the login that
created it. Entries are single use: take() always removes what it finds.
Expired entries are rejected by take() on their own, the periodic sweep only
bounds memory when callbacks never arrive.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Clock:
    """Monotonic clock in seconds."""

    def now(self) -> float:
        return time.monotonic()


class AuthStateStatus(str, Enum):
    MISSING = "missing"
    EXPIRED = "expired"
    VALID = "valid"


@dataclass(frozen=True)
class AuthStateEntry:
    code_verifier: str
    created_at: float


@dataclass(frozen=True)
class AuthStateResult:
    status: AuthStateStatus
    entry: Optional[AuthStateEntry] = None


class AuthStateStore:
    def __init__(self, ttl_seconds: float, clock: Optional[Clock] = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock or Clock()
        self._entries: Dict[str, AuthStateEntry] = {}
        # Routes run in a thread pool and the sweeper has its own thread.
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def store_state(self, state: str, code_verifier: str) -> None:
        entry = AuthStateEntry(code_verifier=code_verifier, created_at=self._clock.now())
        with self._lock:
            self._entries[state] = entry

    def take(self, state: str) -> AuthStateResult:
        with self._lock:
            entry = self._entries.pop(state, None)
        if entry is None:
            return AuthStateResult(AuthStateStatus.MISSING)
        if self.is_expired(entry.created_at):
            return AuthStateResult(AuthStateStatus.EXPIRED)
        return AuthStateResult(AuthStateStatus.VALID, entry)

    def sweep(self) -> int:
        """Drop every entry older than the TTL. Returns how many were removed."""
        now = self._clock.now()
        with self._lock:
            expired = [
                state
                for state, entry in self._entries.items()
                if self.is_expired(entry.created_at, now)
            ]
            for state in expired:
                del self._entries[state]
        return len(expired)

    def is_expired(self, created_at: float, now: Optional[float] = None) -> bool:
        if now is None:
            now = self._clock.now()
        return now - created_at > self.ttl_seconds


class AuthStateSweeper:
    """
    Runs AuthStateStore.sweep() every `interval_seconds` on a daemon thread.

    Nothing starts implicitly: the app lifespan calls start() and stop().
    """

    def __init__(self, store: AuthStateStore, interval_seconds: float) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="auth-state-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info("Auth state sweeper started (interval %.0fs)", self.interval_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(timeout=self.interval_seconds):
            try:
                removed = self.store.sweep()
            except Exception as e:  # noqa: BLE001
                # Expiry is re-checked by take(), the next sweep catches up.
                logger.debug("Auth state sweep failed: %s", e)
                continue
            if removed:
                logger.debug("Auth state sweep removed %d expired entries", removed)
