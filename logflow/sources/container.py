from __future__ import annotations

import queue
import subprocess
import threading
from datetime import datetime
from typing import IO, Iterator, List, Optional, Tuple

from ..types import SourceKind, parse_rfc3339
from .base import LogSource, SourceLine, logger


def split_timestamp(line: str) -> Tuple[Optional[datetime], str]:
    """Split the ``--timestamps`` prefix off a container log line."""
    head, sep, rest = line.partition(" ")
    if not sep:
        return None, line
    ts = parse_rfc3339(head)
    if ts is None:
        return None, line
    return ts, rest


_EOF = object()


class ContainerSource(LogSource):
    """Follows ``<runtime> logs -f --timestamps <container>`` with stdout and stderr merged."""

    runtime = ""

    def __init__(self, name: str, container: str, runtime: Optional[str] = None) -> None:
        super().__init__(name)
        if not container:
            raise ValueError("container id or name must be non-empty")
        self.container = container
        if runtime:
            self.runtime = runtime
        self.kind = self.runtime
        self.process: Optional[subprocess.Popen] = None
        self._lines: "queue.Queue[object]" = queue.Queue()
        self._readers: List[threading.Thread] = []

    def command(self) -> List[str]:
        return [self.runtime, "logs", "-f", "--timestamps", self.container]

    def _spawn(self) -> subprocess.Popen:
        cmd = self.command()
        logger.info("Starting %s", " ".join(cmd))
        return subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )

    def _pump(self, pipe: IO[str], stream_name: str) -> None:
        try:
            for raw in pipe:
                self._lines.put((stream_name, raw.rstrip("\r\n")))
        finally:
            self._lines.put(_EOF)

    def lines(self) -> Iterator[SourceLine]:
        self.process = self._spawn()
        for pipe, stream_name in ((self.process.stdout, "stdout"), (self.process.stderr, "stderr")):
            thread = threading.Thread(
                target=self._pump,
                args=(pipe, stream_name),
                name=f"logflow-{self.runtime}-{stream_name}",
                daemon=True,
            )
            thread.start()
            self._readers.append(thread)

        open_pipes = len(self._readers)
        while open_pipes and not self.stopped.is_set():
            try:
                item = self._lines.get(timeout=0.1)
            except queue.Empty:
                continue
            if item is _EOF:
                open_pipes -= 1
                continue
            stream_name, text = item
            ts, content = split_timestamp(text)
            yield SourceLine(
                text=content,
                metadata={"stream": stream_name, "container_id": self.container},
                timestamp=ts,
            )

        code = self.process.poll()
        if code not in (None, 0):
            logger.warning("%s logs for %s exited with status %s", self.runtime, self.container, code)

    def close(self) -> None:
        super().close()
        process = self.process
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=2.0)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()


class DockerSource(ContainerSource):
    runtime = SourceKind.DOCKER.value


class PodmanSource(ContainerSource):
    runtime = SourceKind.PODMAN.value
