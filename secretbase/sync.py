"""Moving secrets between the store and ``.env`` files.

``grab`` pulls one project environment into ``.env`` files, one file per
stored location. ``share_single`` pushes a literal ``KEY=VALUE``.
``share_directory`` pushes every ``.env`` file under a root and then deletes
stored keys that no local file defines any more. Every write is committed as
it happens; a failure part way through a push leaves earlier keys in place.
"""
import os
import logging
from dataclasses import dataclass, field
from itertools import groupby

from . import store
from .envfile import ROOT_LOCATION, format_line, location_to_path, parse_pair, parse_pairs, walk_env_files

logger = logging.getLogger(__name__)


@dataclass
class ShareResult:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


def grab(conn, project: str, environment: str, root: str) -> list[str]:
    secrets = store.list_secrets(conn, project, environment)
    written = []
    by_location = sorted(secrets, key=lambda s: (s.location, s.key))
    for location, group in groupby(by_location, key=lambda s: s.location):
        path = location_to_path(root, location)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            for secret in group:
                f.write(format_line(secret.key, secret.value) + "\n")
        print(f"Updated file: {path}")
        written.append(path)
    return written

def put_secret(conn, key: str, value: str, location: str, project: str, environment: str) -> str:
    if store.secret_exists(conn, key, project, environment):
        store.update_secret(conn, key, value, location, project, environment)
        print(f"Updated secret: {key}")
        return "updated"
    store.create_secret(conn, key, value, location, project, environment)
    print(f"Created new secret: {key}")
    return "created"

def share_single(conn, project: str, environment: str, pair: str) -> str:
    key, value = parse_pair(pair)
    return put_secret(conn, key, value, ROOT_LOCATION, project, environment)

def prune(conn, project: str, environment: str, local_keys: set[str]) -> list[str]:
    deleted = []
    for key in sorted(store.list_secret_keys(conn, project, environment) - local_keys):
        store.delete_secret(conn, key, project, environment)
        print(f"Deleted unused secret: {key}")
        deleted.append(key)
    return deleted

def share_directory(conn, project: str, environment: str, root: str) -> ShareResult:
    result = ShareResult()
    local_keys: set[str] = set()
    for env_file in walk_env_files(root):
        print(f"Processing file: {env_file.path}")
        for key, value in parse_pairs(env_file.content):
            local_keys.add(key)
            outcome = put_secret(conn, key, value, env_file.location, project, environment)
            getattr(result, outcome).append(key)
    result.deleted = prune(conn, project, environment, local_keys)
    logger.debug("Share finished: %d created, %d updated, %d deleted",
                 len(result.created), len(result.updated), len(result.deleted))
    return result
