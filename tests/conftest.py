import pytest

from secretbase import db, store


@pytest.fixture
def conn(tmp_path):
    """Fixture providing an initialized SQLite store in a temp directory."""
    connection = db.connect(str(tmp_path / "store" / "secretbase.db"))
    db.init_db(connection)
    yield connection
    connection.close()


@pytest.fixture
def project(conn):
    """Fixture that creates a project named 'demo' and returns its name."""
    store.create_project(conn, "demo")
    return "demo"


@pytest.fixture
def env_tree(tmp_path):
    """Fixture to create a working tree with .env files at two levels."""
    root = tmp_path / "work"
    (root / "api").mkdir(parents=True)
    (root / ".env").write_text("A=1\n# full line comment\n\nB=2 # note\n")
    (root / "api" / ".env").write_text("C=3\n")
    (root / "api" / ".env.example").write_text("C='' # keep\n")
    return root
