"""Tests for explicit, scoped and queued transactions."""

import threading
from concurrent.futures import wait

import pytest

from boldsql import Database, ErrorCode, TransactionError

from tests.conftest import count_persons, insert_person


class TestExplicit:
    def test_rollback_then_commit(self, person_db):
        assert person_db.begin_transaction().is_success
        assert person_db.in_transaction
        insert_person(person_db, "Ada", "Lovelace", 36)
        assert person_db.rollback().is_success
        assert not person_db.in_transaction

        assert person_db.begin_transaction().is_success
        insert_person(person_db, "Alan", "Turing", 41)
        assert person_db.commit().is_success

        assert count_persons(person_db) == 1

    def test_nested_begin_fails(self, db):
        assert db.begin_transaction().is_success
        result = db.begin_transaction()
        assert result.is_failure
        assert result.error.code is ErrorCode.STEP_FAILED
        assert db.rollback().is_success

    def test_commit_without_transaction_fails(self, db):
        assert db.commit().is_failure


class TestScoped:
    def test_commits_on_normal_exit(self, person_db):
        with person_db.transaction() as tx:
            assert tx.update(
                "INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"]
            ).is_success
        assert not person_db.in_transaction
        assert count_persons(person_db) == 1

    def test_rolls_back_on_exception(self, person_db):
        with pytest.raises(ValueError):
            with person_db.transaction() as tx:
                tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"])
                raise ValueError("abort")
        assert not person_db.in_transaction
        assert count_persons(person_db) == 0

    def test_explicit_rollback_skips_commit(self, person_db):
        with person_db.transaction() as tx:
            tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"])
            assert tx.rollback().is_success
            assert tx.rolled_back
        assert count_persons(person_db) == 0

    def test_begin_failure_raises(self, db):
        db.close()
        with pytest.raises(TransactionError) as exc_info:
            with db.transaction():
                pass
        assert exc_info.value.error.code is ErrorCode.EXECUTE_QUERY_FAILED

    def test_run_transaction_returns_result(self, person_db):
        def work(tx):
            tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"])
            with tx.query("SELECT COUNT(*) AS n FROM PERSON") as result:
                return next(iter(result)).int_value("n")

        assert person_db.run_transaction(work) == 1
        assert count_persons(person_db) == 1


class TestQueued:
    def test_units_run_in_submission_order(self, person_db):
        events = []

        def unit(n):
            def work(tx):
                events.append(("start", n))
                tx.update("INSERT INTO PERSON (firstName, age) VALUES (?, ?)", [f"p{n}", n])
                events.append(("end", n))
                return n

            return work

        futures = [person_db.async_transaction(unit(n)) for n in range(20)]
        assert [future.result(timeout=10) for future in futures] == list(range(20))

        expected = []
        for n in range(20):
            expected += [("start", n), ("end", n)]
        assert events == expected
        assert count_persons(person_db) == 20

    def test_units_from_many_threads_never_overlap(self, person_db):
        running = []
        overlaps = []
        futures = []
        lock = threading.Lock()

        def work(tx):
            if running:
                overlaps.append(tuple(running))
            running.append(threading.get_ident())
            tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["x"])
            running.pop()

        def submit_some():
            for _ in range(10):
                future = person_db.async_transaction(work)
                with lock:
                    futures.append(future)

        threads = [threading.Thread(target=submit_some) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        done, not_done = wait(futures, timeout=10)
        assert not not_done
        assert overlaps == []
        assert count_persons(person_db) == 40

    def test_failed_unit_rolls_back(self, person_db):
        def work(tx):
            tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"])
            raise ValueError("abort")

        future = person_db.async_transaction(work)
        assert isinstance(future.exception(timeout=10), ValueError)
        assert count_persons(person_db) == 0

    def test_later_units_run_after_failure(self, person_db):
        def fail(tx):
            raise RuntimeError("first unit fails")

        def insert(tx):
            return tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"]).is_success

        failed = person_db.async_transaction(fail)
        succeeded = person_db.async_transaction(insert)
        assert succeeded.result(timeout=10) is True
        assert isinstance(failed.exception(), RuntimeError)
        assert count_persons(person_db) == 1

    def test_futures_cannot_be_cancelled(self, person_db):
        started = threading.Event()
        release = threading.Event()

        def block(tx):
            started.set()
            release.wait(timeout=10)

        first = person_db.async_transaction(block)
        second = person_db.async_transaction(lambda tx: "ran")
        started.wait(timeout=10)
        assert second.cancel() is False
        release.set()
        assert first.result(timeout=10) is None
        assert second.result(timeout=10) == "ran"

    def test_close_waits_for_queued_units(self):
        db = Database(":memory:")
        db.open()
        db.update("CREATE TABLE t (n)")
        futures = [
            db.async_transaction(lambda tx, n=n: tx.update("INSERT INTO t VALUES (?)", [n]))
            for n in range(5)
        ]
        assert db.close()
        assert all(future.done() for future in futures)
        assert all(future.result().is_success for future in futures)

    def test_closed_database_gives_failed_future(self, db):
        db.close()
        future = db.async_transaction(lambda tx: None)
        error = future.exception(timeout=1)
        assert isinstance(error, TransactionError)
        assert error.error.message == "database is not open"


@pytest.mark.asyncio
async def test_transaction_async(person_db):
    def work(tx):
        return tx.update("INSERT INTO PERSON (firstName) VALUES (?)", ["Ada"]).is_success

    assert await person_db.transaction_async(work) is True
    assert count_persons(person_db) == 1


@pytest.mark.asyncio
async def test_transaction_async_propagates_errors(person_db):
    def work(tx):
        raise KeyError("missing")

    with pytest.raises(KeyError):
        await person_db.transaction_async(work)


def test_submit_racing_close_gives_failed_future(person_db):
    # The worker is shut down but the database has not dropped it yet
    person_db._executor.shutdown()
    future = person_db.async_transaction(lambda tx: None)
    error = future.exception(timeout=1)
    assert isinstance(error, TransactionError)
    assert error.error.engine_code == 21
