import os
import logging
from dotenv import load_dotenv

from .db import DEFAULT_DB
from .errors import ConfigError

CONFIG_FILE = os.path.expanduser("~/.secretbase/config.env")

def load_config(path: str | None = None) -> bool:
    # Variables already set in the environment win over the file.
    return load_dotenv(path or CONFIG_FILE, override=False)

def resolve_log_level(name: str | None = None) -> int:
    name = (name or os.getenv("SECRETBASE_LOG_LEVEL") or "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError(f"Invalid SECRETBASE_LOG_LEVEL: {name}")
    return level

def resolve_db_path(cli_path: str | None) -> str:
    if cli_path: return cli_path
    env = os.getenv("SECRETBASE_DB")
    return env if env else DEFAULT_DB

def current_dir_name(root: str | None = None) -> str:
    return os.path.basename(os.path.abspath(root or os.getcwd()))

def print_table(headers: list[str], rows: list[tuple]) -> None:
    cells = [[str(c) for c in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, c in enumerate(row):
            widths[i] = max(widths[i], len(c))
    sep = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    print(sep)
    print("| " + " | ".join(h.upper().ljust(w) for h, w in zip(headers, widths)) + " |")
    print(sep)
    for row in cells:
        print("| " + " | ".join(c.ljust(w) for c, w in zip(row, widths)) + " |")
    print(sep)
