"""Append-only stores for narrated analysis results."""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import List
from uuid import uuid4

from macro_indicators.core.errors import StorageError
from macro_indicators.core.models import AnalysisRecord


class AnalysisStore(ABC):
    @abstractmethod
    def append(self, record: AnalysisRecord) -> str:
        """Persist one record and return its id."""
        raise NotImplementedError

    @abstractmethod
    def list_recent(self, limit: int = 10) -> List[AnalysisRecord]:
        """Return up to ``limit`` records, newest first."""
        raise NotImplementedError


class InMemoryAnalysisStore(AnalysisStore):
    def __init__(self) -> None:
        self._records: List[AnalysisRecord] = []
        self._lock = threading.Lock()

    def append(self, record: AnalysisRecord) -> str:
        stored = replace(record, id=record.id or uuid4().hex)
        with self._lock:
            self._records.append(stored)
        return stored.id

    def list_recent(self, limit: int = 10) -> List[AnalysisRecord]:
        if limit <= 0:
            return []
        with self._lock:
            return list(reversed(self._records[-limit:]))


class JsonlAnalysisStore(AnalysisStore):
    """One JSON document per line; later lines are newer."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: AnalysisRecord) -> str:
        stored = replace(record, id=record.id or uuid4().hex)
        line = json.dumps(stored.to_dict(), ensure_ascii=False, default=str)
        try:
            with self._lock:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
        except OSError as exc:
            raise StorageError(f"Failed to save analysis to {self._path}: {exc}") from exc
        return stored.id

    def list_recent(self, limit: int = 10) -> List[AnalysisRecord]:
        if limit <= 0 or not self._path.exists():
            return []
        try:
            with self._lock:
                lines = self._path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise StorageError(f"Failed to read analyses from {self._path}: {exc}") from exc

        records: List[AnalysisRecord] = []
        for line in reversed(lines):
            if not line.strip():
                continue
            try:
                records.append(AnalysisRecord.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError) as exc:
                raise StorageError(f"Corrupt analysis record in {self._path}: {exc}") from exc
            if len(records) >= limit:
                break
        return records
