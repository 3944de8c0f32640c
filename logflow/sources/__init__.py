from .base import LogSource, SourceLine
from .container import ContainerSource, DockerSource, PodmanSource, split_timestamp
from .pipe import PipeSource

__all__ = [
    "ContainerSource",
    "DockerSource",
    "LogSource",
    "PipeSource",
    "PodmanSource",
    "SourceLine",
    "split_timestamp",
]
