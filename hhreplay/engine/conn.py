import os
import sqlite3

DB_ENV_VAR = "HHREPLAY_DB"


def default_db_path() -> str:
    package_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(package_dir, 'data', 'hands.db')


def get_conn(db_file: str | None = None) -> sqlite3.Connection:
    """Open the hand database: explicit path, then $HHREPLAY_DB, then the package default."""
    db_file = db_file or os.environ.get(DB_ENV_VAR) or default_db_path()
    if db_file != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_file)), exist_ok=True)
    return sqlite3.connect(db_file)
