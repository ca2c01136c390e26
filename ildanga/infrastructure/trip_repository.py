"""Durable storage for the single in-progress trip.

The whole trip is one record under a fixed namespace key. There is no schema
versioning: records that cannot be read are dropped and the caller starts
from an empty trip.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

from ildanga.config.settings import get_settings

_logger = logging.getLogger("ildanga.storage")

STORAGE_KEY = "ildanga-trip-storage"


class TripStateRepository(Protocol):
    backend: str

    def load(self) -> Optional[dict[str, Any]]: ...

    def save(self, state: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...


class InMemoryTripRepository:
    backend = "memory"

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._records: dict[str, str] = {}
        if initial is not None:
            self.save(initial)

    def load(self) -> Optional[dict[str, Any]]:
        raw = self._records.get(STORAGE_KEY)
        if raw is None:
            return None
        return json.loads(raw)["state"]

    def save(self, state: dict[str, Any]) -> None:
        # 직렬화해서 보관해야 호출자가 dict를 바꿔도 저장본이 변하지 않는다.
        self._records[STORAGE_KEY] = json.dumps({"state": state}, ensure_ascii=False)

    def clear(self) -> None:
        self._records.pop(STORAGE_KEY, None)


class JsonFileTripRepository:
    """Trip record kept in a small JSON file, rewritten atomically on every save."""

    backend = "file"

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            _logger.warning("Unreadable trip storage %s, starting fresh: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Optional[dict[str, Any]]:
        record = self._read_all().get(STORAGE_KEY)
        if not isinstance(record, dict):
            return None
        state = record.get("state")
        return state if isinstance(state, dict) else None

    def save(self, state: dict[str, Any]) -> None:
        data = self._read_all()
        data[STORAGE_KEY] = {"state": state}
        self._write_all(data)

    def clear(self) -> None:
        data = self._read_all()
        if data.pop(STORAGE_KEY, None) is not None:
            self._write_all(data)

    def _write_all(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".trip-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def build_trip_repository(path: str | Path | None = None) -> TripStateRepository:
    target = Path(path) if path is not None else get_settings().trip_storage_path
    _logger.info("Trip storage at %s", target)
    return JsonFileTripRepository(target)
