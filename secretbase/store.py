import logging
import sqlite3
from typing import NamedTuple, Optional

from .crypto import hash_password
from .db import ENVIRONMENT_TYPES
from .errors import (
    EnvironmentNotFoundError,
    ProjectExistsError,
    ProjectNotFoundError,
    UserExistsError,
)

logger = logging.getLogger(__name__)

_SECRET_SCOPE = """
    FROM secrets s
    INNER JOIN environment_secrets es ON s.id = es.secret_id
    INNER JOIN environments e ON es.environment_id = e.id
    INNER JOIN projects p ON e.project_id = p.id
"""


class Secret(NamedTuple):
    key: str
    value: str
    location: str


# --- Projects ---

def project_exists(conn: sqlite3.Connection, name: str) -> bool:
    cur = conn.cursor()
    cur.execute("SELECT COUNT(*) FROM projects WHERE name=?;", (name,))
    return cur.fetchone()[0] > 0

def require_project(conn: sqlite3.Connection, name: str):
    if not project_exists(conn, name):
        raise ProjectNotFoundError(name)

def create_project(conn: sqlite3.Connection, name: str) -> int:
    """Create a project together with its three environments.

    The project row and the environment rows are committed as one unit, so a
    failure part way leaves no project behind.
    """
    if project_exists(conn, name):
        raise ProjectExistsError(name)
    cur = conn.cursor()
    try:
        cur.execute("INSERT INTO projects(name, active) VALUES(?, 1);", (name,))
    except sqlite3.IntegrityError:
        conn.rollback()
        raise ProjectExistsError(name)
    project_id = cur.lastrowid
    try:
        cur.executemany(
            "INSERT INTO environments(project_id, environment_type) VALUES(?, ?);",
            [(project_id, env) for env in ENVIRONMENT_TYPES],
        )
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    logger.debug("Created project %s (id %s)", name, project_id)
    return project_id

def list_projects(conn: sqlite3.Connection) -> list[tuple[str, bool]]:
    cur = conn.cursor()
    cur.execute("SELECT name, active FROM projects ORDER BY name;")
    return [(name, bool(active)) for name, active in cur.fetchall()]


# --- Users ---

def create_user(conn: sqlite3.Connection, email: str, password: str, admin: bool = False) -> int:
    cur = conn.cursor()
    try:
        cur.execute("INSERT INTO users(email, password, admin) VALUES(?,?,?);",
                    (email, hash_password(password), int(admin)))
        conn.commit()
    except sqlite3.IntegrityError:
        conn.rollback()
        raise UserExistsError(email)
    return cur.lastrowid

def list_users(conn: sqlite3.Connection) -> list[tuple[str, bool]]:
    cur = conn.cursor()
    cur.execute("SELECT email, admin FROM users ORDER BY email;")
    return [(email, bool(admin)) for email, admin in cur.fetchall()]


# --- Secrets ---

def environment_id(conn: sqlite3.Connection, project: str, environment: str) -> Optional[int]:
    cur = conn.cursor()
    cur.execute("""
        SELECT e.id
          FROM environments e
         INNER JOIN projects p ON e.project_id = p.id
         WHERE p.name=? AND e.environment_type=?;
    """, (project, environment))
    row = cur.fetchone()
    return row[0] if row else None

def secret_exists(conn: sqlite3.Connection, key: str, project: str, environment: str) -> bool:
    cur = conn.cursor()
    cur.execute(f"SELECT COUNT(*) {_SECRET_SCOPE} WHERE s.key=? AND p.name=? AND e.environment_type=?;",
                (key, project, environment))
    return cur.fetchone()[0] > 0

def create_secret(conn: sqlite3.Connection, key: str, value: str, location: str,
                  project: str, environment: str, creator_id: Optional[int] = None) -> int:
    env_id = environment_id(conn, project, environment)
    if env_id is None:
        raise EnvironmentNotFoundError(project, environment)
    cur = conn.cursor()
    try:
        cur.execute("INSERT INTO secrets(key, value, location, creator_id) VALUES(?,?,?,?);",
                    (key, value, location, creator_id))
        secret_id = cur.lastrowid
        cur.execute("INSERT INTO environment_secrets(environment_id, secret_id) VALUES(?,?);",
                    (env_id, secret_id))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    return secret_id

def update_secret(conn: sqlite3.Connection, key: str, value: str, location: str,
                  project: str, environment: str) -> int:
    cur = conn.cursor()
    cur.execute(f"""
        UPDATE secrets
           SET value=?, location=?
         WHERE id IN (SELECT s.id {_SECRET_SCOPE}
                       WHERE s.key=? AND p.name=? AND e.environment_type=?);
    """, (value, location, key, project, environment))
    conn.commit()
    return cur.rowcount

def delete_secret(conn: sqlite3.Connection, key: str, project: str, environment: str) -> int:
    cur = conn.cursor()
    cur.execute(f"""
        DELETE FROM secrets
         WHERE id IN (SELECT s.id {_SECRET_SCOPE}
                       WHERE s.key=? AND p.name=? AND e.environment_type=?);
    """, (key, project, environment))
    conn.commit()
    return cur.rowcount

def list_secret_keys(conn: sqlite3.Connection, project: str, environment: str) -> set[str]:
    cur = conn.cursor()
    cur.execute(f"SELECT s.key {_SECRET_SCOPE} WHERE p.name=? AND e.environment_type=?;",
                (project, environment))
    return {row[0] for row in cur.fetchall()}

def list_secrets(conn: sqlite3.Connection, project: str, environment: str) -> list[Secret]:
    cur = conn.cursor()
    cur.execute(f"""
        SELECT s.key, s.value, s.location {_SECRET_SCOPE}
         WHERE p.name=? AND e.environment_type=?
         ORDER BY s.key;
    """, (project, environment))
    return [Secret(*row) for row in cur.fetchall()]
