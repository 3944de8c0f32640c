import logging
import os
import sys
from typing import Optional, Tuple

_DEFAULT_LEVEL = os.getenv("LOGFLOW_LOG_LEVEL", "INFO").upper()
_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# (prefix, handler, level) of the active file redirect, picked up by loggers created later.
_redirect: Optional[Tuple[str, logging.Handler, Optional[str | int]]] = None


def _under(name: str, prefix: str) -> bool:
    return name == prefix or name.startswith(prefix + ".")


def _attach(logger: logging.Logger, handler: logging.Handler, level: str | int | None) -> None:
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.propagate = False
    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)


def setup_logger(name: str, level: str | int | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if _redirect is not None and _under(name, _redirect[0]):
        _, handler, redirect_level = _redirect
        _attach(logger, handler, level if level is not None else (redirect_level or _DEFAULT_LEVEL))
        return logger

    resolved_level = level if level is not None else _DEFAULT_LEVEL
    logger.setLevel(resolved_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def redirect_logs_to_file(path: str, level: str | int | None = None, prefix: str = "logflow") -> logging.Handler:
    """Point every ``prefix.*`` logger at ``path``, including ones created afterwards."""
    global _redirect
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    _redirect = (prefix, handler, level)

    manager = logging.Logger.manager.loggerDict
    names = [name for name in list(manager.keys()) if _under(name, prefix)]
    if prefix not in names:
        names.append(prefix)
    for name in names:
        _attach(logging.getLogger(name), handler, level)
    return handler


def restore_stderr_logging() -> None:
    """Undo ``redirect_logs_to_file``: redirected loggers write to stderr again."""
    global _redirect
    if _redirect is None:
        return
    prefix, handler, _ = _redirect
    _redirect = None
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if _under(name, prefix):
            logger = logging.getLogger(name)
            if handler in logger.handlers:
                _attach(logger, stream, None)
    handler.close()
