"""Command line runner: execute one SQL statement and print its rows."""

import argparse
import logging
import sys

from boldsql.config import get_log_level
from boldsql.database import Database
from boldsql.result_set import ResultSet


def _format(value: str | int | float | bytes | None) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        return f"x'{value.hex()}'"
    return str(value)


def _print_rows(result_set: ResultSet) -> bool:
    """Print a header and every row. Returns False if stepping failed."""
    printed_header = False
    while result_set.next():
        if not printed_header:
            print("\t".join(result_set.column_names))
            printed_header = True
        values = (result_set.value(i).value for i in range(result_set.column_count))
        print("\t".join(_format(value) for value in values))
    return result_set.step_error is None


def main(argv: list[str] | None = None) -> int:
    """Run the statement given on the command line. Returns the exit status."""
    parser = argparse.ArgumentParser(
        prog="boldsql", description="Run one SQL statement against a SQLite database."
    )
    parser.add_argument("sql", help="the statement to run")
    parser.add_argument("args", nargs="*", help="text values for ? placeholders, in order")
    parser.add_argument("--db", default=None, help="database path (default: BOLD_DB_PATH)")
    options = parser.parse_args(argv)

    # Logging goes to stderr; stdout carries the rows
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    db = Database(options.db)
    if not db.open():
        print(f"error: could not open {db.path}", file=sys.stderr)
        return 1
    try:
        result = db.query(options.sql, options.args)
        if result.error is not None:
            print(f"error: {result.error.code}: {result.error.message}", file=sys.stderr)
            return 1
        with result:
            assert result.result_set is not None
            if not _print_rows(result.result_set):
                error = result.result_set.step_error
                assert error is not None
                print(f"error: {error.code}: {error.message}", file=sys.stderr)
                return 1
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
