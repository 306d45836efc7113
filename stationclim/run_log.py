"""Append-only event log for pipeline runs.

Each CLI invocation owns one :class:`RunLog`, written as a JSONL file with one
JSON object per line: ``run_start``, one ``step`` event per pipeline stage
carrying row/station counts, and ``run_end``. Readers are tolerant: blank,
malformed or partially-written lines are skipped.
"""

from __future__ import annotations

import json
import os
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from stationclim.config import RUN_LOG_DIR


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_run_id(ts: datetime | None = None) -> str:
    """Create a sortable run id (UTC)."""

    t = ts or datetime.now(timezone.utc)
    return t.strftime("%Y%m%dT%H%M%SZ")


def _safe_slug(s: str) -> str:
    return "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in str(s))


def make_log_path(*, command: str, run_id: str, log_dir: Path | None = None) -> Path:
    d = Path(log_dir or RUN_LOG_DIR)
    d.mkdir(parents=True, exist_ok=True)
    return d / f"run_{_safe_slug(command)}_{_safe_slug(run_id)}.jsonl"


def _json_default(obj: Any) -> Any:
    # Only called for values json cannot encode itself.
    if isinstance(obj, np.generic):
        return obj.item()
    if obj is pd.NA or obj is pd.NaT:
        return None
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def append_event(path: Path, event: dict[str, Any]) -> None:
    """Append a single event to a JSONL file (write one line, flush, fsync)."""

    if "ts_utc" not in event:
        event = dict(event)
        event["ts_utc"] = _utc_now_iso()

    path.parent.mkdir(parents=True, exist_ok=True)
    line = json.dumps(event, ensure_ascii=False, default=_json_default)

    with path.open("a", encoding="utf-8", newline="\n") as f:
        f.write(line)
        f.write("\n")
        f.flush()
        try:
            os.fsync(f.fileno())
        except OSError:
            # Some filesystems do not support fsync.
            pass


def read_events(path: Path, *, max_events: int | None = None) -> list[dict[str, Any]]:
    """Read events from a JSONL file, keeping the last ``max_events`` if given."""

    if not path.exists():
        return []

    acc: deque[dict[str, Any]] = deque(maxlen=None if max_events is None else int(max_events))

    with path.open("r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(obj, dict):
                acc.append(obj)

    return list(acc)


class RunLog:
    """Events of one CLI run, all tagged with the same ``run_id``.

    Typical use::

        log = RunLog("missing", log_dir=Path("logs"))
        log.start(target="precip_mm")
        log.step("scan", stations=3, stations_with_missing=2)
        log.finish("ok")
    """

    def __init__(self, command: str, *, log_dir: Path | None = None, run_id: str | None = None) -> None:
        self.command = command
        self.run_id = run_id or create_run_id()
        self.path = make_log_path(command=command, run_id=self.run_id, log_dir=log_dir)

    def _emit(self, event_type: str, **fields: Any) -> None:
        append_event(self.path, {"type": event_type, "run_id": self.run_id, **fields})

    def start(self, **fields: Any) -> None:
        self._emit("run_start", command=self.command, **fields)

    def step(self, name: str, **counts: Any) -> None:
        """Record a pipeline stage and its row / station counts."""
        self._emit("step", step=name, **counts)

    def finish(self, status: str = "ok", **fields: Any) -> None:
        self._emit("run_end", status=status, **fields)
