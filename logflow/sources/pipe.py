from __future__ import annotations

import sys
from typing import Iterator, Optional, TextIO

from ..types import SourceKind
from .base import LogSource, SourceLine


class PipeSource(LogSource):
    kind = SourceKind.PIPE.value

    def __init__(self, name: str, stream: Optional[TextIO] = None) -> None:
        super().__init__(name)
        self.input = stream if stream is not None else sys.stdin

    def lines(self) -> Iterator[SourceLine]:
        for raw in self.input:
            if self.stopped.is_set():
                return
            yield SourceLine(text=raw.rstrip("\r\n"))
