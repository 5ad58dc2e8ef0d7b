"""Base repository class with common CRUD operations."""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from core.db import CONNECTIVITY_ERRORS, Base
from core.errors import StorageUnavailableError
from core.logging import db_logger

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Usage:
        class IssueRepository(BaseRepository[Issue]):
            model = Issue

        repo = IssueRepository(session)
        issue = repo.get_by_id("0f1e...")
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def storage_guard(self, operation: str) -> Generator[None, None, None]:
        """Convert database connectivity failures into StorageUnavailableError."""
        try:
            yield
        except CONNECTIVITY_ERRORS as e:
            db_logger.error(
                "storage_unavailable",
                operation=operation,
                model=self.model.__name__,
                error_type=type(e).__name__,
            )
            raise StorageUnavailableError(operation, e) from e

    def get_by_id(self, id: Any) -> T | None:
        """Get a single record by primary key."""
        with self.storage_guard("get_by_id"):
            return self.session.get(self.model, id)

    def create(self, **kwargs) -> T:
        """Create a new record."""
        with self.storage_guard("create"):
            instance = self.model(**kwargs)
            self.session.add(instance)
            self.session.flush()
            return instance

    def delete(self, id: Any) -> bool:
        """Delete a record by primary key."""
        with self.storage_guard("delete"):
            instance = self.session.get(self.model, id)
            if instance is None:
                return False
            self.session.delete(instance)
            self.session.flush()
            return True

    def filter_conditions(self, filters: Mapping[str, Any]) -> list:
        """
        Build equality conditions from a mapping of column name to value.

        Raises:
            ValueError: If a key is not a column of the model.
        """
        columns = self.model.__table__.columns
        conditions = []
        for key, value in filters.items():
            if key not in columns:
                raise ValueError(f"Unknown filter key: {key}")
            conditions.append(getattr(self.model, key) == value)
        return conditions

    def commit(self) -> None:
        """Commit the session; connectivity failures raise StorageUnavailableError."""
        with self.storage_guard("commit"):
            self.session.commit()
