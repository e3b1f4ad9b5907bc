from unittest import mock

import psycopg2
import pytest
from psycopg2.pool import PoolError

from qaforum import create_app
from qaforum.db import Database
from qaforum.errors import DatabaseError


@pytest.fixture
def pool():
    pool = mock.MagicMock()
    conn = pool.getconn.return_value
    conn.closed = 0
    return pool


@pytest.fixture
def database(pool):
    database = Database()
    database._pool = pool
    return database


def test_cursor_commits_and_returns_connection(database, pool):
    conn = pool.getconn.return_value

    with database.cursor() as cursor:
        cursor.execute('SELECT 1')

    conn.commit.assert_called_once_with()
    conn.rollback.assert_not_called()
    pool.putconn.assert_called_once_with(conn, close=False)


def test_driver_error_rolls_back_and_is_wrapped(database, pool):
    conn = pool.getconn.return_value
    conn.cursor.return_value.__enter__.return_value.execute.side_effect = psycopg2.OperationalError('gone')

    with pytest.raises(DatabaseError):
        with database.cursor() as cursor:
            cursor.execute('SELECT 1')

    conn.commit.assert_not_called()
    conn.rollback.assert_called_once_with()
    pool.putconn.assert_called_once_with(conn, close=False)


def test_other_errors_roll_back_and_propagate(database, pool):
    conn = pool.getconn.return_value

    with pytest.raises(KeyError):
        with database.cursor():
            raise KeyError('id')

    conn.rollback.assert_called_once_with()
    pool.putconn.assert_called_once()


def test_closed_connection_is_discarded(database, pool):
    conn = pool.getconn.return_value
    conn.closed = 2
    conn.cursor.return_value.__enter__.return_value.execute.side_effect = psycopg2.InterfaceError('closed')

    with pytest.raises(DatabaseError):
        with database.cursor() as cursor:
            cursor.execute('SELECT 1')

    conn.rollback.assert_not_called()
    pool.putconn.assert_called_once_with(conn, close=True)


def test_pool_exhaustion_is_a_database_error(database, pool):
    pool.getconn.side_effect = PoolError('connection pool exhausted')

    with pytest.raises(DatabaseError):
        with database.cursor():
            pass

    pool.putconn.assert_not_called()


def test_unreachable_server_is_a_database_error():
    database = Database()
    database.dsn = 'postgresql://nobody@127.0.0.1:1/none'
    database.connect_timeout = 1

    with pytest.raises(DatabaseError):
        with database.cursor():
            pass


def test_unreachable_server_answers_500():
    app = create_app({'DATABASE_URL': 'postgresql://nobody@127.0.0.1:1/none', 'DB_CONNECT_TIMEOUT': 1})

    response = app.test_client().get('/questions')

    assert response.status_code == 500
    assert response.get_json() == {'message': 'Cannot retrieve questions due to database connection.'}


def test_close_releases_pool(database, pool):
    database.close()

    pool.closeall.assert_called_once_with()
    assert database._pool is None


def test_unadaptable_parameter_is_a_database_error(database, pool):
    conn = pool.getconn.return_value
    conn.cursor.return_value.__enter__.return_value.execute.side_effect = ValueError(
        'A string literal cannot contain NUL (0x00) characters.'
    )

    with pytest.raises(DatabaseError):
        with database.cursor() as cursor:
            cursor.execute('SELECT %s', ('Open\x00',))

    conn.rollback.assert_called_once_with()


def test_nul_in_search_filter_answers_endpoint_message(database, pool):
    conn = pool.getconn.return_value
    conn.cursor.return_value.__enter__.return_value.execute.side_effect = ValueError(
        'A string literal cannot contain NUL (0x00) characters.'
    )
    app = create_app({'TESTING': True}, database=database)

    response = app.test_client().get('/questions/search?title=%00')

    assert response.status_code == 500
    assert response.get_json() == {'message': 'Cannot get questions due to database connection.'}
