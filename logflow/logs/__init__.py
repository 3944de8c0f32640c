from .buffer import DEFAULT_CAPACITY, RingBuffer
from .parser import classify_line, parse_level, parse_structured, parse_timestamp

__all__ = [
    "DEFAULT_CAPACITY",
    "RingBuffer",
    "classify_line",
    "parse_level",
    "parse_structured",
    "parse_timestamp",
]
