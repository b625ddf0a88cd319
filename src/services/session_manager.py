"""
Session manager for in-memory round sessions.

Each play screen (browser tab) owns one RoundEngine, addressed by an
opaque session id. Sessions are discarded when the tab goes away
(DELETE) or when their idle TTL lapses. Expired sessions are swept on
every create, so abandoned tabs do not accumulate. Nothing survives a
restart.
"""

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Optional, TypeVar

from core.logging import LoggerMixin
from engines.round_engine import RoundEngine


T = TypeVar("T")


@dataclass
class SessionData(Generic[T]):
    """Container for session data with metadata."""

    data: T
    created_at: float
    updated_at: float = field(default=0.0)
    ttl_seconds: int = 3600

    def is_expired(self, now: float) -> bool:
        """Expire on idle time: every access pushes the deadline back."""
        return now - max(self.created_at, self.updated_at) > self.ttl_seconds

    def touch(self, now: float) -> None:
        self.updated_at = now


class RoundSessionManager(LoggerMixin):
    """
    Thread-safe registry of round engines.

    Usage:
        manager = RoundSessionManager(ttl_seconds=3600)
        session_id = manager.create(engine)
        engine = manager.get(session_id)
        manager.delete(session_id)   # closes the engine
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            ttl_seconds: Idle time after which a session is dropped
            clock: Monotonic time source
        """
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._sessions: Dict[str, SessionData[RoundEngine]] = {}

    def create(self, engine: RoundEngine) -> str:
        """Register an engine, first evicting sessions idle past the TTL."""
        self.clear_expired()
        session_id = uuid.uuid4().hex[:12]
        now = self._clock()
        with self._lock:
            self._sessions[session_id] = SessionData(
                data=engine,
                created_at=now,
                updated_at=now,
                ttl_seconds=self._ttl_seconds,
            )
        self.logger.info("Round session created", session_id=session_id, client_id=engine.client_id)
        return session_id

    def get(self, session_id: str) -> Optional[RoundEngine]:
        """
        Get the engine for a session.

        Returns:
            The engine, or None if not found/expired
        """
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(now):
                del self._sessions[session_id]
                session.data.close()
                return None
            session.touch(now)
            return session.data

    def delete(self, session_id: str) -> bool:
        """Close and drop a session. Returns False if it did not exist."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.data.close()
        self.logger.info("Round session closed", session_id=session_id)
        return True

    def clear_expired(self) -> int:
        """
        Clear all expired sessions.

        Returns:
            Number of sessions cleared
        """
        now = self._clock()
        with self._lock:
            expired_keys = [k for k, v in self._sessions.items() if v.is_expired(now)]
            expired = [self._sessions.pop(k) for k in expired_keys]

        for session in expired:
            session.data.close()

        if expired:
            self.logger.info("Cleared expired sessions", count=len(expired))
        return len(expired)

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {"sessions": len(self._sessions)}


# Global session manager
# Singleton to keep round state across requests

_round_sessions: Optional[RoundSessionManager] = None


def get_round_session_manager() -> RoundSessionManager:
    """Get the round session manager singleton."""
    global _round_sessions
    if _round_sessions is None:
        from config.settings import get_settings
        _round_sessions = RoundSessionManager(ttl_seconds=get_settings().session_ttl_seconds)
    return _round_sessions


def clear_round_sessions() -> None:
    global _round_sessions
    _round_sessions = None
