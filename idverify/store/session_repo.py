"""
Process-local store for form sessions.

Drafts are never persisted: a session lives in memory until it is restarted,
idles past SESSION_IDLE_TTL_SEC, or the process exits.
"""
import secrets
import threading
from typing import Dict, Optional

from idverify.settings import settings
from idverify.store.models import FlowSession
from idverify.observability.logging import log
from idverify.utils.time import now_ms

_sessions: Dict[str, FlowSession] = {}
_lock = threading.Lock()


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


def _expired(s: FlowSession, at_ms: int) -> bool:
    ttl_ms = int(settings.SESSION_IDLE_TTL_SEC) * 1000
    return ttl_ms > 0 and at_ms - s.lastSeenAtMs > ttl_ms


def _evict_expired(at_ms: int) -> int:
    stale = [sid for sid, s in _sessions.items() if _expired(s, at_ms)]
    for sid in stale:
        del _sessions[sid]
    return len(stale)


def load_session(session_id: Optional[str]) -> FlowSession:
    """Return the live session for this id, or a fresh one (new id) if unknown or expired."""
    ts = now_ms()
    with _lock:
        evicted = _evict_expired(ts)
        s = _sessions.get(session_id or "")
        if s is None:
            s = FlowSession(sessionId=new_session_id(), createdAtMs=ts)
            _sessions[s.sessionId] = s
            created = True
        else:
            created = False
        s.lastSeenAtMs = ts
    if evicted:
        log(event="sessions_evicted", count=evicted)
    if created:
        log(event="session_created", sessionId=s.sessionId)
    return s


def save_session(session: FlowSession) -> None:
    with _lock:
        session.lastSeenAtMs = now_ms()
        _sessions[session.sessionId] = session


def drop_session(session_id: str) -> None:
    with _lock:
        _sessions.pop(session_id, None)


def session_count() -> int:
    with _lock:
        return len(_sessions)


def clear_sessions() -> None:
    with _lock:
        _sessions.clear()
