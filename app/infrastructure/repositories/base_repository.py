"""
SQLAlchemy implementation of the Base Repository.
Raw driver errors are logged and rethrown as DomainError(INFRASTRUCTURE).
"""

from contextlib import contextmanager
from typing import Any, Generic, Iterator, Optional, Type, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DomainError, DomainErrorKind, ResourceKind
from app.domain.repositories.base import BaseRepository
from app.infrastructure.database import Base

ModelType = TypeVar("ModelType", bound=Base)

logger = structlog.get_logger(__name__)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository implementation for SQLAlchemy models."""

    resource: ResourceKind

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    @contextmanager
    def guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(
                "Integrity constraint rejected write",
                resource=self.resource.value,
                operation=operation,
            )
            raise DomainError(DomainErrorKind.CONFLICT, self.resource) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(
                "Database error",
                resource=self.resource.value,
                operation=operation,
                error=str(exc),
            )
            raise DomainError(DomainErrorKind.INFRASTRUCTURE, self.resource) from exc

    def get_by_id(self, id: UUID) -> Optional[ModelType]:
        with self.guard("get_by_id"):
            return self.db.query(self.model).filter(self.model.id == id).first()

    def create(self, obj_in: Any) -> ModelType:
        obj_data = obj_in.model_dump(exclude_unset=True) if hasattr(obj_in, "model_dump") else dict(obj_in)
        db_obj = self.model(**obj_data)
        return self.save(db_obj, "create")

    def update(self, db_obj: ModelType, obj_in: Any) -> ModelType:
        update_data = obj_in.model_dump(exclude_unset=True) if hasattr(obj_in, "model_dump") else dict(obj_in)
        if not update_data:
            raise DomainError(DomainErrorKind.NO_UPDATE_FIELDS, self.resource)

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        return self.save(db_obj, "update")

    def save(self, db_obj: ModelType, operation: str) -> ModelType:
        with self.guard(operation):
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
        return db_obj
