import os
import logging
from typing import Mapping, Optional

from .envfile import ENV_SUFFIX, extract_keys, walk_env_files

logger = logging.getLogger(__name__)

EXAMPLE_SUFFIX = ".env.example"

def blank_line(key: str, line: str) -> str:
    """Return ``KEY=''`` keeping any trailing comment from ``line``."""
    value = line.split("=", 1)[1] if "=" in line else ""
    idx = value.find("#")
    if idx != -1:
        return f"{key}='' {value[idx:]}"
    return f"{key}=''"

def reconcile(env_keys: Mapping[str, str],
              existing: Optional[Mapping[str, str]] = None) -> list[str]:
    lines = []
    for key in sorted(env_keys):
        if existing is not None and key in existing:
            lines.append(existing[key])
        else:
            lines.append(blank_line(key, env_keys[key]))
    return lines

def example_path_for(env_path: str) -> str:
    return env_path[:-len(ENV_SUFFIX)] + EXAMPLE_SUFFIX

def update_example_file(env_keys: Mapping[str, str], example_path: str) -> list[str]:
    existing = None
    if os.path.exists(example_path):
        with open(example_path, "r", encoding="utf-8") as f:
            existing = extract_keys(f.read())
    lines = reconcile(env_keys, existing)
    with open(example_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    logger.debug("Wrote %d keys to %s", len(lines), example_path)
    return lines

def setup(root: str) -> list[str]:
    written = []
    for env_file in walk_env_files(root):
        print("/" + os.path.relpath(env_file.path, root).replace(os.sep, "/"))
        example_path = example_path_for(env_file.path)
        update_example_file(extract_keys(env_file.content), example_path)
        written.append(example_path)
    return written
