"""Tests for base repository pattern."""
import pytest
from contextlib import contextmanager
from unittest.mock import MagicMock
from dataclasses import dataclass
from typing import Any, Dict

from workwell.shared.database.repository import (
    BaseRepository,
    RepositoryError,
    DuplicateError,
)


@dataclass
class SampleEntity:
    """Entity for repository tests."""
    id: str
    name: str
    value: int


class SampleRepository(BaseRepository[SampleEntity]):
    """Concrete repository for testing."""

    def _row_to_entity(self, row: tuple) -> SampleEntity:
        return SampleEntity(id=row[0], name=row[1], value=row[2])

    def _entity_to_params(self, entity: SampleEntity) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "name": entity.name,
            "value": entity.value,
        }


def make_connection_manager(cursor: MagicMock):
    """Connection manager whose connections hand out the given cursor."""
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    manager = MagicMock()

    @contextmanager
    def get_connection():
        yield conn

    manager.get_connection = get_connection
    return manager, conn


class TestRepositoryExceptions:
    """Tests for repository exception classes."""

    def test_repository_error(self):
        error = RepositoryError("Test error")
        assert str(error) == "Test error"

    def test_duplicate_error(self):
        error = DuplicateError("Duplicate entity")
        assert isinstance(error, RepositoryError)


class TestBaseRepository:
    """Tests for BaseRepository class."""

    @pytest.fixture
    def cursor(self):
        return MagicMock()

    @pytest.fixture
    def repository(self, cursor):
        manager, _ = make_connection_manager(cursor)
        return SampleRepository(manager, "sample_table")

    def test_initialization(self, repository):
        assert repository.table_name == "sample_table"

    def test_find_row_returns_none_when_missing(self, repository, cursor):
        cursor.fetchall.return_value = []

        assert repository._find_row("missing") is None

    def test_find_row_returns_first_row(self, repository, cursor):
        cursor.fetchall.return_value = [("id_1", "name", 42)]

        assert repository._find_row("id_1") == ("id_1", "name", 42)
        query, params = cursor.execute.call_args.args
        assert "WHERE id = %s" in query
        assert params == ("id_1",)

    def test_insert_returns_id_and_commits(self, cursor):
        manager, conn = make_connection_manager(cursor)
        repository = SampleRepository(manager, "sample_table")
        cursor.fetchone.return_value = ("id_1",)

        new_id = repository.insert(SampleEntity(id="id_1", name="n", value=1))

        assert new_id == "id_1"
        conn.commit.assert_called_once()
        query, values = cursor.execute.call_args.args
        assert query.startswith("INSERT INTO sample_table (id, name, value)")
        assert values == ["id_1", "n", 1]

    def test_insert_duplicate_raises(self, repository, cursor):
        cursor.fetchone.return_value = None

        with pytest.raises(DuplicateError):
            repository.insert(SampleEntity(id="id_1", name="n", value=1))

    def test_insert_failure_rolls_back_and_wraps(self, cursor):
        manager, conn = make_connection_manager(cursor)
        repository = SampleRepository(manager, "sample_table")
        cursor.execute.side_effect = RuntimeError("disk full")

        with pytest.raises(RepositoryError) as exc_info:
            repository.insert(SampleEntity(id="id_1", name="n", value=1))

        conn.rollback.assert_called_once()
        assert "disk full" in str(exc_info.value)

    def test_row_to_entity(self, repository):
        row = ("id_1", "test_name", 42)
        entity = repository._row_to_entity(row)

        assert entity.id == "id_1"
        assert entity.name == "test_name"
        assert entity.value == 42
