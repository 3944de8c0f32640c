from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .dashboard.pane import Pane
from .types import LogLevel
from .utils import setup_logger, write_jsonl


logger = setup_logger("logflow.export")

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


def export_filename(pane_name: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    safe = _UNSAFE_RE.sub("_", pane_name).strip("._") or "pane"
    return f"logflow-{safe}-{stamp}.jsonl"


def export_pane(
    pane: Pane,
    export_dir: str | Path,
    min_level: LogLevel = LogLevel.DEBUG,
    now: Optional[datetime] = None,
) -> Path:
    """Write the pane's entries at or above ``min_level`` to a JSONL file, oldest first."""
    path = Path(export_dir) / export_filename(pane.name, now)
    entries = pane.buffer.filter(min_level)
    written = write_jsonl(path, (entry.to_dict() for entry in entries))
    logger.info("Exported %d entries from %s to %s", written, pane.name, path)
    return path
