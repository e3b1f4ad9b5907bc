import logging
import threading
from contextlib import contextmanager

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool
from flask import current_app

from qaforum.errors import DatabaseError

logger = logging.getLogger(__name__)


class Database:
    """Shared PostgreSQL connection pool, registered on the app as an extension.

    The pool is created on first use so the service can boot while the
    database is still unreachable; requests then fail with DatabaseError.
    """

    def __init__(self, app=None):
        self.dsn = None
        self.minconn = 1
        self.maxconn = 10
        self.connect_timeout = 5
        self._pool = None
        self._lock = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.dsn = app.config['DATABASE_URL']
        self.minconn = app.config['DB_POOL_MIN']
        self.maxconn = app.config['DB_POOL_MAX']
        self.connect_timeout = app.config['DB_CONNECT_TIMEOUT']
        app.extensions['database'] = self

    @property
    def pool(self):
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    self._pool = ThreadedConnectionPool(
                        self.minconn,
                        self.maxconn,
                        self.dsn,
                        connect_timeout=self.connect_timeout,
                        cursor_factory=RealDictCursor,
                    )
                    logger.info('Opened connection pool (%d-%d connections)', self.minconn, self.maxconn)
        return self._pool

    @contextmanager
    def cursor(self):
        """
        Borrow one pooled connection for a unit of work.

        Every statement executed on the yielded cursor belongs to the same
        transaction: it is committed when the block exits normally and rolled
        back otherwise. Driver and parameter adaptation errors surface as
        DatabaseError.
        """
        try:
            conn = self.pool.getconn()
        except psycopg2.Error as e:
            raise DatabaseError(str(e)) from e

        try:
            with conn.cursor() as cursor:
                yield cursor
            conn.commit()
        # psycopg2 raises a bare ValueError when it cannot adapt a parameter (NUL in a string)
        except (psycopg2.Error, ValueError) as e:
            _rollback(conn)
            raise DatabaseError(str(e)) from e
        except BaseException:
            _rollback(conn)
            raise
        finally:
            self.pool.putconn(conn, close=conn.closed != 0)

    def close(self):
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None


def get_db():
    return current_app.extensions['database']


def _rollback(conn):
    if conn.closed:
        return
    try:
        conn.rollback()
    except psycopg2.Error:
        logger.warning('Rollback failed, connection will be discarded', exc_info=True)
