"""Shared test fixtures."""

import pytest

from boldsql import Database


@pytest.fixture
def db():
    """Open in-memory database."""
    database = Database(":memory:")
    assert database.open()
    yield database
    database.close()


@pytest.fixture
def person_db(db):
    """In-memory database with an empty PERSON table."""
    result = db.update("CREATE TABLE PERSON (firstName text, lastName text, age integer)")
    assert result.is_success
    return db


def insert_person(db, first_name, last_name, age):
    """Insert one PERSON row with indexed arguments."""
    result = db.update(
        "INSERT INTO PERSON (firstName, lastName, age) VALUES (?, ?, ?)",
        [first_name, last_name, age],
    )
    assert result.is_success, result.error


def count_persons(db) -> int:
    """Return the number of rows in PERSON."""
    with db.query("SELECT COUNT(*) AS COUNT FROM PERSON") as result:
        assert result.is_success, result.error
        assert result.result_set.next()
        return result.result_set.row["COUNT"].int
