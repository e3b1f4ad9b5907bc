from contextlib import contextmanager

import pytest

from qaforum import create_app
from qaforum.db import Database
from qaforum.errors import DatabaseError


class FakeCursor:
    def __init__(self, db):
        self.db = db
        self._result = []

    def execute(self, sql, params=None):
        self.db.executed.append((' '.join(sql.split()), params))
        if self.db.fail_at is not None and len(self.db.executed) - 1 == self.db.fail_at:
            raise DatabaseError('connection reset')
        self._result = self.db.results.pop(0) if self.db.results else []

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return list(self._result)


class FakeDatabase(Database):
    """
    Scripted stand-in for the pool.

    `results` holds one list of rows per statement, consumed in order.
    `fail_at` makes the n-th executed statement (0-based) raise DatabaseError.
    """

    def __init__(self):
        super().__init__()
        self.results = []
        self.executed = []
        self.fail_at = None
        self.commits = 0

    @contextmanager
    def cursor(self):
        yield FakeCursor(self)
        self.commits += 1

    def script(self, *results):
        self.results.extend(list(r) for r in results)

    @property
    def statements(self):
        return [sql for sql, _ in self.executed]


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def app(db):
    return create_app({'TESTING': True}, database=db)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def question_row():
    return {
        'id': 1,
        'title': 'What is OpenAPI?',
        'description': 'OpenAPI is a specification for...',
        'category': 'Technology',
        'created_at': '2024-06-27T12:00:00+00:00',
        'updated_at': '2024-06-27T12:00:00+00:00',
    }


@pytest.fixture
def answer_row():
    return {'id': 7, 'question_id': 1, 'content': 'This is an answer to the question.'}
