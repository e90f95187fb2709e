import os, sqlite3
import logging

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_DB = os.path.expanduser("~/.secretbase/secretbase.db")
ENVIRONMENT_TYPES = ("development", "staging", "production")

def ensure_dir_for(path: str):
    d = os.path.dirname(os.path.abspath(path))
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)

def connect(db_path: str) -> sqlite3.Connection:
    try:
        ensure_dir_for(db_path)
        conn = sqlite3.connect(db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
    except (OSError, sqlite3.Error) as e:
        raise ConfigError(f"Failed to connect to the database at {db_path}: {e}")
    logger.debug("Connected to %s", db_path)
    return conn

def init_db(conn: sqlite3.Connection):
    cur = conn.cursor()
    cur.execute("""
        CREATE TABLE IF NOT EXISTS projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            active INTEGER NOT NULL DEFAULT 1
        );
    """)
    cur.execute("""
        CREATE TABLE IF NOT EXISTS environments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            environment_type TEXT NOT NULL
                CHECK (environment_type IN ('development', 'staging', 'production')),
            UNIQUE(project_id, environment_type)
        );
    """)
    cur.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            admin INTEGER NOT NULL DEFAULT 0
        );
    """)
    cur.execute("""
        CREATE TABLE IF NOT EXISTS secrets (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            key TEXT NOT NULL,
            value TEXT NOT NULL DEFAULT '',
            location TEXT NOT NULL DEFAULT '.',
            creator_id INTEGER REFERENCES users(id) ON DELETE SET NULL
        );
    """)
    cur.execute("""
        CREATE TABLE IF NOT EXISTS environment_secrets (
            environment_id INTEGER NOT NULL REFERENCES environments(id) ON DELETE CASCADE,
            secret_id INTEGER NOT NULL REFERENCES secrets(id) ON DELETE CASCADE,
            PRIMARY KEY (environment_id, secret_id)
        );
    """)
    conn.commit()
