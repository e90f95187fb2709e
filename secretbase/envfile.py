"""Reading and writing ``.env`` style files.

Two parsers live here. ``extract_keys`` keeps each defining line intact (inline
comments included) and is what ``.env.example`` generation works from.
``parse_pairs`` is what gets pushed to the store: inline comments are cut off
and both sides of the ``=`` are trimmed.
"""
import os
import re
from typing import Iterator, NamedTuple

from .errors import EnvFileError, MalformedSecretError

ENV_SUFFIX = ".env"
ROOT_LOCATION = "."

_INLINE_COMMENT = re.compile(r"(?<!\\)#")


class EnvFile(NamedTuple):
    path: str
    location: str
    content: str


def is_env_file(name: str) -> bool:
    return name.endswith(ENV_SUFFIX)

def extract_keys(content: str) -> dict[str, str]:
    keys: dict[str, str] = {}
    for raw in content.splitlines():
        line = raw.strip()
        eq = line.find("=")
        if eq == -1:
            continue
        # a '#' ahead of the '=' makes the whole line a comment
        if "#" in line[:eq]:
            continue
        key = line[:eq].strip()
        keys[key] = line
    return keys

def strip_inline_comment(line: str) -> str:
    m = _INLINE_COMMENT.search(line)
    return line[:m.start()].strip() if m else line

def parse_pairs(content: str) -> list[tuple[str, str]]:
    pairs = []
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        line = strip_inline_comment(line)
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        k = k.strip()
        if not k:
            continue
        pairs.append((k, v.strip()))
    return pairs

def parse_pair(text: str) -> tuple[str, str]:
    if "=" not in text:
        raise MalformedSecretError("Invalid secret. Expected format: key=value")
    k, v = text.split("=", 1)
    k = k.strip()
    if not k:
        raise MalformedSecretError("Invalid secret. The key must not be empty.")
    return k, v.strip()

def format_line(key: str, value: str) -> str:
    return f"{key}={value}"

def relative_location(root: str, directory: str) -> str:
    rel = os.path.relpath(directory, root)
    return rel.replace(os.sep, "/")

def location_to_path(root: str, location: str) -> str:
    if location == ROOT_LOCATION:
        return os.path.join(root, ENV_SUFFIX)
    return os.path.join(root, *location.split("/"), ENV_SUFFIX)

def walk_env_files(root: str) -> Iterator[EnvFile]:
    """Yield every env file below ``root`` along with its location and text.

    Directories and files are visited in sorted order so repeated walks of the
    same tree produce the same sequence. Read errors propagate to the caller.
    """
    def _raise(err: OSError):
        raise err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        for name in sorted(filenames):
            if not is_env_file(name):
                continue
            path = os.path.join(dirpath, name)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    content = f.read()
            except UnicodeDecodeError as e:
                raise EnvFileError(path, e)
            yield EnvFile(path, relative_location(root, dirpath), content)
