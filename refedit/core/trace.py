"""
Line-oriented diagnostic trace for catalog edits.

Every cascade operation writes its start, each step and its outcome to an
append-only trace file, one JSON object per line. The trace is optional and
best effort: a trace that cannot be written never fails an edit.
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TraceLog:
    """Append-only JSON-lines sink for cascade diagnostics."""

    def __init__(self, log_path: Path):
        self._log_path = Path(log_path)
        self._fd = None

    def _ensure_open(self) -> bool:
        """Open the trace file, creating its directory if needed."""
        if self._fd is not None:
            return True
        try:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            self._fd = open(self._log_path, 'a', encoding='utf-8')
            return True
        except OSError as e:
            logger.debug(f"Cannot open trace {self._log_path}: {e}")
            return False

    def write(self, line: str):
        """Append one raw diagnostic line."""
        if not self._ensure_open():
            return
        try:
            self._fd.write(line.rstrip('\n') + '\n')
            self._fd.flush()
        except OSError as e:
            logger.debug(f"Cannot write to trace: {e}")

    def event(self, event: str, **fields):
        """Append a structured event."""
        record = {'timestamp': time.time(), 'event': event}
        record.update(fields)
        self.write(json.dumps(record, ensure_ascii=False))

    def close(self):
        if self._fd:
            try:
                self._fd.close()
            except OSError:
                pass
            self._fd = None


class NullTrace:
    """Trace sink that discards everything."""

    def write(self, line: str):
        pass

    def event(self, event: str, **fields):
        pass

    def close(self):
        pass


def open_trace(path: Optional[Path]):
    """Return a TraceLog for path, or a NullTrace when path is None."""
    if path is None:
        return NullTrace()
    return TraceLog(path)
