"""Tests for PostgresClient - pooling and transactions. Need TEST_DATABASE_URL."""

import pytest


@pytest.fixture
def scratch_table(db):
    db.execute("CREATE TABLE IF NOT EXISTS pg_client_scratch (n INTEGER NOT NULL)")
    db.execute("TRUNCATE pg_client_scratch")
    yield "pg_client_scratch"
    db.execute("DROP TABLE IF EXISTS pg_client_scratch")


class TestPostgresClientInit:
    """Connection pool initialization."""

    def test_creates_pool_with_valid_url(self, db):
        """Valid URL creates working connection pool."""
        result = db.execute_scalar("SELECT 1")
        assert result == 1


class TestExecuteMethods:
    """Query execution methods."""

    def test_execute_returns_list_of_dicts(self, db):
        """execute() returns list of row dicts."""
        results = db.execute("SELECT 1 as num, 'hello' as word")
        assert results == [{"num": 1, "word": "hello"}]

    def test_execute_empty_returns_empty_list(self, db):
        """No matching rows returns [], not None."""
        results = db.execute("SELECT 1 WHERE false")
        assert results == []

    def test_execute_single_returns_dict(self, db):
        """execute_single() returns first row as dict."""
        result = db.execute_single("SELECT 42 as answer")
        assert result == {"answer": 42}

    def test_execute_single_no_rows_returns_none(self, db):
        """execute_single() returns None for empty result."""
        result = db.execute_single("SELECT 1 WHERE false")
        assert result is None

    def test_execute_scalar_no_rows_returns_none(self, db):
        """execute_scalar() returns None for empty result."""
        result = db.execute_scalar("SELECT 1 WHERE false")
        assert result is None

    def test_execute_commits_writes(self, db, scratch_table):
        db.execute(f"INSERT INTO {scratch_table} (n) VALUES (%s)", (1,))
        assert db.execute_scalar(f"SELECT COUNT(*) FROM {scratch_table}") == 1


class TestTransaction:
    """All-or-nothing multi-statement units."""

    def test_commits_on_clean_exit(self, db, scratch_table):
        with db.transaction() as tx:
            tx.execute(f"INSERT INTO {scratch_table} (n) VALUES (1), (2)")
            assert tx.execute_scalar(f"SELECT COUNT(*) FROM {scratch_table}") == 2

        assert db.execute_scalar(f"SELECT COUNT(*) FROM {scratch_table}") == 2

    def test_rolls_back_on_exception(self, db, scratch_table):
        with pytest.raises(RuntimeError):
            with db.transaction() as tx:
                tx.execute(f"INSERT INTO {scratch_table} (n) VALUES (1)")
                raise RuntimeError("abort")

        assert db.execute_scalar(f"SELECT COUNT(*) FROM {scratch_table}") == 0

    def test_rolls_back_on_database_error(self, db, scratch_table):
        import psycopg2

        with pytest.raises(psycopg2.errors.NotNullViolation):
            with db.transaction() as tx:
                tx.execute(f"INSERT INTO {scratch_table} (n) VALUES (1)")
                tx.execute(f"INSERT INTO {scratch_table} (n) VALUES (NULL)")

        assert db.execute_scalar(f"SELECT COUNT(*) FROM {scratch_table}") == 0

    def test_connection_reusable_after_rollback(self, db, scratch_table):
        with pytest.raises(RuntimeError):
            with db.transaction():
                raise RuntimeError("abort")

        assert db.execute_scalar("SELECT 1") == 1
