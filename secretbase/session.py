import os
import sqlite3
import logging
from typing import Optional

from . import db
from .utils import current_dir_name

logger = logging.getLogger(__name__)


class Session:
    """State shared by the commands of one ``sbx`` invocation.

    Holds the single database connection, opened on first use, and the
    working root that project names and ``.env`` paths are resolved against.
    """

    def __init__(self, db_path: str, root: Optional[str] = None, interactive: bool = False):
        self.db_path = db_path
        self.root = os.path.abspath(root or os.getcwd())
        self.interactive = interactive
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = db.connect(self.db_path)
            db.init_db(self._conn)
        return self._conn

    def project_name(self, explicit: Optional[str] = None) -> str:
        if explicit:
            return explicit
        name = current_dir_name(self.root)
        print(f"Using current directory name as project name: {name}")
        return name

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Closed connection to %s", self.db_path)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
