"""MySQL-backed result-link store: the production results database.

Same tables and queries as sqlite_store, written for MySQL. BINARY makes
the substring tests case-sensitive under the default collations.
"""

import pymysql
import pymysql.cursors

from .base import ResultStore, StoreError
from ..core.models import ResultLink


class MySqlResultStore(ResultStore):
    """ResultStore on a PyMySQL connection (autocommit, dict rows)."""

    def __init__(self, conn):
        self.conn = conn

    @classmethod
    def open(cls, host: str, name: str, user: str, password: str) -> 'MySqlResultStore':
        """Connect to the results database.

        Raises:
            StoreError: the connection failed.
        """
        try:
            conn = pymysql.connect(host=host, database=name, user=user,
                                   password=password, autocommit=True,
                                   cursorclass=pymysql.cursors.DictCursor)
        except pymysql.MySQLError as e:
            raise StoreError(f'Unable to connect to {name} on {host}: {e}') from e
        return cls(conn)

    def close(self):
        self.conn.close()

    def find_installed(self, file_fragment: str, year: int) -> list[dict]:
        with self.conn.cursor() as cur:
            cur.execute(
                '''SELECT * FROM results_ow
                   WHERE LOCATE(%s, BINARY results_file) > 0
                     AND LOCATE(%s, event_date) > 0''',
                (file_fragment, f'{year}-'))
            return list(cur.fetchall())

    def find_event_titles(self, keyword: str) -> list[dict]:
        with self.conn.cursor() as cur:
            cur.execute(
                '''SELECT * FROM event_titles
                   WHERE event_type = 'o'
                     AND obsolete = 0
                     AND LOCATE(%s, BINARY event_title) > 0''',
                (keyword,))
            return list(cur.fetchall())

    def insert_result(self, link: ResultLink):
        with self.conn.cursor() as cur:
            cur.execute(
                '''INSERT INTO results_ow
                    (event_id, event_date, category, distance, results_type,
                     results_file, remote)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)''',
                (link.event_id, link.event_date, link.category, link.distance,
                 link.results_type, link.results_file, link.remote))
