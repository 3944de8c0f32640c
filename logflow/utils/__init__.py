from .env import env_int, load_env_file
from .json_utils import read_json, write_jsonl
from .logging import redirect_logs_to_file, restore_stderr_logging, setup_logger

__all__ = [
    "env_int",
    "load_env_file",
    "read_json",
    "write_jsonl",
    "redirect_logs_to_file",
    "restore_stderr_logging",
    "setup_logger",
]
