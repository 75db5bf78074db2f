from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import ValidationError

from golfsg.config import get_settings

from .models import RoundSession, RoundSummary

logger = logging.getLogger(__name__)


class RoundNotFound(Exception):
    pass


SAFE_ROUND_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _sanitize_round_id(round_id: str) -> str:
    """
    Restrict round ids to filesystem-safe characters to prevent path traversal.

    Only allow ASCII letters, digits, underscores, and dashes. Reject anything else.
    """

    if not SAFE_ROUND_ID_RE.match(round_id):
        raise ValueError(f"Invalid round_id for filesystem usage: {round_id!r}")
    return round_id


class RoundService:
    """Stores one JSON document per round under ``base_dir``."""

    def __init__(self, base_dir: Path | str | None = None):
        base = Path(base_dir or get_settings().rounds_dir).expanduser()
        self._base_dir = base.resolve()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path(self, round_id: str) -> Path:
        return self._base_dir / f"{_sanitize_round_id(round_id)}.json"

    def save(self, session: RoundSession) -> RoundSession:
        path = self._path(session.id)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        return session

    def load(self, round_id: str) -> RoundSession:
        path = self._path(round_id)
        if not path.exists():
            raise RoundNotFound(round_id)
        return RoundSession.model_validate_json(path.read_text(encoding="utf-8"))

    def exists(self, round_id: str) -> bool:
        return self._path(round_id).exists()

    def delete(self, round_id: str) -> None:
        path = self._path(round_id)
        if not path.exists():
            raise RoundNotFound(round_id)
        path.unlink()

    def list_sessions(self, limit: int = 50) -> List[RoundSession]:
        """Stored sessions, newest first; unreadable files are skipped."""

        if not self._base_dir.exists():
            return []

        sessions: List[RoundSession] = []
        for path in self._base_dir.glob("*.json"):
            try:
                sessions.append(
                    RoundSession.model_validate_json(path.read_text(encoding="utf-8"))
                )
            except (OSError, ValidationError) as exc:
                logger.warning("skipping unreadable round file %s: %s", path.name, exc)
                continue

        sessions.sort(
            key=lambda s: s.date or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )
        return sessions[: max(1, limit)]

    def list_summaries(self, limit: int = 50) -> List[RoundSummary]:
        return [s.summary for s in self.list_sessions(limit) if s.summary is not None]


@lru_cache(maxsize=1)
def get_round_service() -> RoundService:
    return RoundService()


__all__ = [
    "RoundNotFound",
    "RoundService",
    "get_round_service",
]
