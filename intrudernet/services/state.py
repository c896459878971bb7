"""In-process state for settings and monitor sessions.

Hosts use this module to access (and hot-reload) the settings and the one
`MonitorSession` per monitored stream.
"""

from __future__ import annotations

from threading import RLock

from intrudernet.core.config.settings import MonitorSettings, load_settings, settings_to_dict
from intrudernet.services.monitor import MonitorSession

_settings: MonitorSettings | None = None
_sessions: dict[str, MonitorSession] = {}
_lock = RLock()


def get_settings() -> MonitorSettings:
    """Return cached settings, loading them on first use."""

    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
    return _settings


def reload_settings(data: dict | None = None) -> MonitorSettings:
    """Reload settings and apply them to every live session.

    Args:
        data: Optional patch dict merged into the loaded settings.
    """

    global _settings
    with _lock:
        base = load_settings()
        if data:
            _settings = MonitorSettings(**{**settings_to_dict(base), **data})
        else:
            _settings = base
        for session in _sessions.values():
            session.apply_settings(_settings)
    return _settings


def get_session(stream_id: str = "default") -> MonitorSession:
    """Return the session for `stream_id`, creating and starting it if needed."""

    with _lock:
        session = _sessions.get(stream_id)
        if session is None:
            session = MonitorSession(get_settings(), stream_id=stream_id)
            session.start()
            _sessions[stream_id] = session
    return session


def stop_session(stream_id: str = "default") -> None:
    """Stop and discard one session (if present)."""

    with _lock:
        session = _sessions.pop(stream_id, None)
    if session is not None:
        session.stop()


def stop_all() -> None:
    with _lock:
        sessions = list(_sessions.values())
        _sessions.clear()
    for session in sessions:
        session.stop()
