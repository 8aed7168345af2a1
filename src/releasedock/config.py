from __future__ import annotations

import json
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_path

DEFAULT_SERVER_URL = "https://releasedock.io"
DEFAULT_TIMEOUT_S = 30.0

# On-disk key -> Session field.
_SESSION_KEYS = {
    "accessKeyName": "access_key_name",
    "providerName": "provider_name",
    "providerUniqueId": "provider_unique_id",
    "serverUrl": "server_url",
}


@dataclass(frozen=True)
class Session:
    access_key_name: str
    provider_name: str
    provider_unique_id: str
    server_url: str

    def to_json(self) -> dict[str, str]:
        return {wire: getattr(self, field) for wire, field in _SESSION_KEYS.items()}

    @classmethod
    def from_json(cls, raw: Any) -> "Session | None":
        if not isinstance(raw, dict):
            return None
        values: dict[str, str] = {}
        for wire, field in _SESSION_KEYS.items():
            v = raw.get(wire)
            if not isinstance(v, str):
                return None
            values[field] = v
        return cls(**values)


def session_path(path_override: str | Path | None = None) -> Path:
    if path_override is not None:
        return Path(path_override).expanduser()
    if env := os.getenv("RELEASEDOCK_SESSION_PATH"):
        return Path(env).expanduser()
    return user_config_path("releasedock") / "session.json"


def load_session(path_override: str | Path | None = None) -> Session | None:
    """
    Return the persisted session, or None when there is none.

    A missing, unreadable, or malformed file means "not logged in".
    """
    path = session_path(path_override)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    return Session.from_json(raw)


def save_session(session: Session, path_override: str | Path | None = None) -> Path:
    path = session_path(path_override)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(session.to_json(), indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)

    # Best-effort permissions hardening; the file is enough to log back in.
    try:
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError:
        pass

    return path


def clear_session(path_override: str | Path | None = None) -> bool:
    """Delete the session file. Returns False if there was nothing to delete."""
    path = session_path(path_override)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def resolve_server_url(cli_value: str | None = None) -> str:
    # CLI overrides env; env overrides the default.
    url = cli_value or os.getenv("RELEASEDOCK_SERVER_URL") or DEFAULT_SERVER_URL
    return url.rstrip("/")


def resolve_timeout_s(cli_value: float | None = None) -> float:
    raw = cli_value if cli_value is not None else os.getenv("RELEASEDOCK_TIMEOUT_S")
    if raw is None:
        return DEFAULT_TIMEOUT_S
    try:
        return float(raw)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_S
