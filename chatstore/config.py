"""Application configuration helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .credentials import DEFAULT_SERVICE

LOGGER = logging.getLogger(__name__)


DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "aios-chat"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:1420",
    "http://127.0.0.1:1420",
    "tauri://localhost",
)
DEFAULT_BACKEND_HOST = "127.0.0.1"
DEFAULT_BACKEND_PORT = 5050


def _resolve_path(
    value: str | os.PathLike[str] | None, default: Path, *, root: Path | None = None
) -> Path:
    """Return ``default`` when unset, else ``value`` resolved against ``root``."""

    if value is None:
        return default
    candidate = Path(value).expanduser()
    if candidate.is_absolute():
        return candidate
    return ((root or Path.cwd()) / candidate).resolve()


def _guard_directory(path: Path, *, label: str) -> Path:
    """Ensure ``path`` does not resolve to an unsafe location."""

    resolved = path.resolve()
    if resolved == Path(resolved.anchor):
        raise ValueError(f"{label} may not be the filesystem root ({resolved})")
    return path


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_port(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_BACKEND_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"BACKEND_PORT must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"BACKEND_PORT out of range: {port}")
    return port


def _split_origins(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_CORS_ORIGINS
    origins = tuple(item.strip() for item in raw.split(",") if item.strip())
    return origins or DEFAULT_CORS_ORIGINS


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration resolved from environment variables."""

    data_dir: Path
    db_path: Path
    logs_dir: Path
    keyring_service: str
    cors_origins: tuple[str, ...]
    backend_host: str = DEFAULT_BACKEND_HOST
    backend_port: int = DEFAULT_BACKEND_PORT
    backend_reload: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        data_dir = _resolve_path(os.getenv("CHATSTORE_DATA_DIR"), DEFAULT_DATA_DIR)
        data_dir = _guard_directory(data_dir, label="CHATSTORE_DATA_DIR")
        db_path = _resolve_path(
            os.getenv("CHATSTORE_DB_PATH"), data_dir / "chat.db", root=data_dir
        )
        _guard_directory(db_path.parent, label="CHATSTORE_DB_PATH parent")
        logs_dir = _guard_directory(
            _resolve_path(os.getenv("LOG_DIR"), data_dir / "logs", root=data_dir),
            label="LOG_DIR",
        )
        keyring_service = (
            os.getenv("CHATSTORE_KEYRING_SERVICE", DEFAULT_SERVICE).strip() or DEFAULT_SERVICE
        )
        cors_origins = _split_origins(os.getenv("CHATSTORE_CORS_ORIGINS"))
        backend_host = os.getenv("BACKEND_HOST", "").strip() or DEFAULT_BACKEND_HOST

        return cls(
            data_dir=data_dir,
            db_path=db_path,
            logs_dir=logs_dir,
            keyring_service=keyring_service,
            cors_origins=cors_origins,
            backend_host=backend_host,
            backend_port=_parse_port(os.getenv("BACKEND_PORT")),
            backend_reload=_env_flag("BACKEND_RELOAD"),
        )

    def ensure_dirs(self) -> None:
        """Ensure all required directories exist."""

        for directory in (self.data_dir, self.db_path.parent, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def log_summary(self) -> None:
        """Log environment-derived settings for observability."""

        payload: Dict[str, Any] = {
            "data_dir": str(self.data_dir),
            "db_path": str(self.db_path),
            "logs_dir": str(self.logs_dir),
            "keyring_service": self.keyring_service,
            "cors_origins": list(self.cors_origins),
            "backend_host": self.backend_host,
            "backend_port": self.backend_port,
            "backend_reload": self.backend_reload,
        }
        LOGGER.info("runtime configuration: %s", json.dumps(payload, sort_keys=True))


__all__ = ["AppConfig", "DEFAULT_BACKEND_HOST", "DEFAULT_BACKEND_PORT", "DEFAULT_DATA_DIR"]
