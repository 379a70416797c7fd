from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from creator_crm.services.errors import IdentityRequiredError, RecordNotFoundError

logger = logging.getLogger("creator_crm.store")

ModelT = TypeVar("ModelT")
ReadT = TypeVar("ReadT", bound=BaseModel)

# Assigned by the store, never by callers.
GENERATED_FIELDS = frozenset({"id", "user_id", "created_at"})


@dataclass(frozen=True)
class MutationResult(Generic[ReadT]):
    record: Optional[ReadT]
    snapshot: list[ReadT] = field(default_factory=list)


def _writable(values: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if k not in GENERATED_FIELDS}


class _IdentityScoped:
    def __init__(self, db: Session, *, user_id: str | None, model: Type[Any], name: str):
        if not user_id:
            raise IdentityRequiredError(f"{name} requires an authenticated identity")
        self.db = db
        self.user_id = str(user_id)
        self.model = model
        self.name = name

    def _query(self):
        return self.db.query(self.model).filter(self.model.user_id == self.user_id)

    def _checked(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        values = _writable(changes)
        unknown = [k for k in values if not hasattr(self.model, k)]
        if unknown:
            raise AttributeError(f"{self.name} has no field(s) {unknown!r}")
        return values

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


class CollectionStore(_IdentityScoped, Generic[ModelT, ReadT]):
    """CRUD proxy over one collection, scoped to a single identity.

    Every mutation commits and then refetches the whole collection, so callers
    see the post-mutation snapshot rather than a locally patched one.
    """

    def __init__(
        self,
        db: Session,
        *,
        user_id: str | None,
        model: Type[ModelT],
        read_schema: Type[ReadT],
        name: str,
        limit: int | None = None,
    ):
        super().__init__(db, user_id=user_id, model=model, name=name)
        self.read_schema = read_schema
        self.limit = limit

    def _to_read(self, row: ModelT) -> ReadT:
        return self.read_schema.model_validate(row)

    def _get_row(self, record_id: str) -> ModelT:
        row = self._query().filter(self.model.id == str(record_id)).first()
        if row is None:
            raise RecordNotFoundError(self.name, str(record_id))
        return row

    def fetch(self) -> list[ReadT]:
        q = self._query().order_by(self.model.created_at.desc(), self.model.id.desc())
        if self.limit:
            q = q.limit(self.limit)
        return [self._to_read(r) for r in q.all()]

    def get(self, record_id: str) -> ReadT:
        return self._to_read(self._get_row(record_id))

    def _filtered(self, filters: Mapping[str, Any]):
        q = self._query()
        for column, value in filters.items():
            q = q.filter(getattr(self.model, column) == value)
        return q

    def find(self, **filters: Any) -> list[ReadT]:
        q = self._filtered(filters).order_by(self.model.created_at.desc())
        return [self._to_read(r) for r in q.all()]

    def count(self, **filters: Any) -> int:
        """Remote row count; ignores the history cap."""
        return int(self._filtered(filters).count())

    def create(self, data: Mapping[str, Any]) -> MutationResult[ReadT]:
        row = self.model(**_writable(data), user_id=self.user_id)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        record = self._to_read(row)
        logger.info("record_created", extra={"collection": self.name, "record_id": record.id})
        return MutationResult(record=record, snapshot=self.fetch())

    def update(self, record_id: str, changes: Mapping[str, Any]) -> MutationResult[ReadT]:
        row = self._get_row(record_id)
        values = self._checked(changes)
        for key, value in values.items():
            setattr(row, key, value)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return MutationResult(record=self._to_read(row), snapshot=self.fetch())

    def delete(self, record_id: str) -> MutationResult[ReadT]:
        row = self._get_row(record_id)
        record = self._to_read(row)
        self.db.delete(row)
        self._commit()
        logger.info("record_deleted", extra={"collection": self.name, "record_id": record.id})
        return MutationResult(record=record, snapshot=self.fetch())

    def update_where(
        self, values: Mapping[str, Any], **filters: Any
    ) -> tuple[int, list[ReadT]]:
        """Bulk update within the identity; returns (rows touched, snapshot)."""

        count = self._filtered(filters).update(self._checked(values), synchronize_session=False)
        self._commit()
        self.db.expire_all()
        return int(count or 0), self.fetch()

    def delete_all(self) -> MutationResult[ReadT]:
        self._query().delete(synchronize_session=False)
        self._commit()
        return MutationResult(record=None, snapshot=self.fetch())


class SingletonStore(_IdentityScoped, Generic[ModelT, ReadT]):
    """At most one row per identity (profile, settings).

    `get_or_create` relies on the unique constraint on user_id: when two first
    accesses race, the loser's insert fails and it returns the winner's row.
    """

    def __init__(
        self,
        db: Session,
        *,
        user_id: str | None,
        model: Type[ModelT],
        read_schema: Type[ReadT],
        name: str,
    ):
        super().__init__(db, user_id=user_id, model=model, name=name)
        self.read_schema = read_schema

    def _get_or_create_row(self) -> ModelT:
        row = self._query().first()
        if row is not None:
            return row

        row = self.model(user_id=self.user_id)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._query().first()
            if existing is None:
                raise
            return existing
        self.db.refresh(row)
        logger.info("singleton_created", extra={"collection": self.name, "user_id": self.user_id})
        return row

    def get_or_create(self) -> ReadT:
        return self.read_schema.model_validate(self._get_or_create_row())

    def update(self, changes: Mapping[str, Any]) -> ReadT:
        row = self._get_or_create_row()
        values = self._checked(changes)
        for key, value in values.items():
            setattr(row, key, value)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return self.read_schema.model_validate(row)
