"""SQLite-backed result-link store.

Two tables back the public Open Water Event Results page:
  - results_ow:   one row per linked result file (what we insert)
  - event_titles: reference list of event titles (read only here)
"""

import sqlite3

from .base import ResultStore, StoreError
from ..core.models import ResultLink


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS results_ow (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id        INTEGER NOT NULL,
    event_date      TEXT,
    category        TEXT,
    distance        TEXT,
    results_type    TEXT,
    results_file    TEXT,
    remote          INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS event_titles (
    event_id        INTEGER PRIMARY KEY,
    event_type      TEXT NOT NULL,
    obsolete        INTEGER NOT NULL DEFAULT 0,
    event_title     TEXT NOT NULL
);
"""


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a new connection that yields rows as sqlite3.Row."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection):
    """Create the results_ow and event_titles tables if missing."""
    conn.executescript(SCHEMA_SQL)
    conn.commit()


class SqliteResultStore(ResultStore):
    """ResultStore on a sqlite3 connection.

    Every statement stands alone: SELECTs read, and each INSERT is
    committed as soon as it is executed.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @classmethod
    def open(cls, db_path: str) -> 'SqliteResultStore':
        """Open (creating if needed) the database at db_path.

        Raises:
            StoreError: the database can't be opened.
        """
        try:
            conn = get_connection(db_path)
            init_db(conn)
        except sqlite3.Error as e:
            raise StoreError(f'Unable to open the results database {db_path}: {e}') from e
        return cls(conn)

    def close(self):
        self.conn.close()

    def find_installed(self, file_fragment: str, year: int) -> list[dict]:
        # instr() rather than LIKE: LIKE ignores case in sqlite
        cur = self.conn.execute(
            '''SELECT * FROM results_ow
               WHERE instr(results_file, ?) > 0
                 AND instr(event_date, ?) > 0''',
            (file_fragment, f'{year}-'))
        return [dict(row) for row in cur.fetchall()]

    def find_event_titles(self, keyword: str) -> list[dict]:
        cur = self.conn.execute(
            '''SELECT * FROM event_titles
               WHERE event_type = 'o'
                 AND obsolete = 0
                 AND instr(event_title, ?) > 0''',
            (keyword,))
        return [dict(row) for row in cur.fetchall()]

    def insert_result(self, link: ResultLink):
        self.conn.execute(
            '''INSERT INTO results_ow
                (event_id, event_date, category, distance, results_type,
                 results_file, remote)
                VALUES (?, ?, ?, ?, ?, ?, ?)''',
            (link.event_id, link.event_date, link.category, link.distance,
             link.results_type, link.results_file, link.remote))
        self.conn.commit()
