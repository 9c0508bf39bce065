"""Generic data access over SQLAlchemy with separate write and read engines."""

from __future__ import annotations

import json
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from itertools import islice
from typing import Any

from sqlalchemy import Text, TypeDecorator, Uuid, inspect, select
from sqlalchemy.orm import sessionmaker

INSERT_BATCH_SIZE = 100


def to_json(value):
    """Encode *value* as compact JSON with sorted keys."""
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def from_json(value):
    """Decode JSON held in a str or bytes value."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value).decode("utf-8")
    elif not isinstance(value, str):
        raise TypeError("invalid type for JSONB")
    return json.loads(value)


class JSONB(TypeDecorator):
    """A column holding a JSON document stored as text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else to_json(value)

    def process_result_value(self, value, dialect):
        return None if value is None else from_json(value)


@dataclass
class Pagination:
    """One page of records and whether pages exist around it."""

    data: list[Any] = field(default_factory=list)
    has_next: bool = False
    has_prev: bool = False

    def to_dict(self):
        return {
            "data": [record.to_dict() for record in self.data],
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def _is_zero(value):
    if value is None or isinstance(value, bool):
        return value is None or value is False
    if isinstance(value, str):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return False


class BaseRepository:
    """CRUD operations for one mapped *model*.

    Reads use *read_engine*; writes use *write_engine*. Write methods take an
    optional session *tx* from :meth:`transaction`; without one they run in
    their own committed transaction. Records marked with ``deleted_at`` are
    invisible to reads.
    """

    def __init__(self, model, write_engine, read_engine=None):
        self.model = model
        self._table = model.__table__
        self._writer = sessionmaker(bind=write_engine, expire_on_commit=False)
        self._reader = sessionmaker(
            bind=write_engine if read_engine is None else read_engine,
            expire_on_commit=False,
        )

    @contextmanager
    def transaction(self):
        """Yield a session that commits on success and rolls back on error."""
        with self._writer.begin() as session:
            yield session

    @contextmanager
    def _writing(self, tx):
        if tx is not None:
            yield tx
            return
        with self._writer.begin() as session:
            yield session

    def _live(self):
        return select(self.model).where(self.model.deleted_at.is_(None))

    def _conditions(self, filters):
        for key, value in (filters or {}).items():
            column = self._column(key)
            if value is None:
                yield column.is_(None)
            elif isinstance(value, (list, tuple, set, frozenset)):
                yield column.in_(list(value))
            else:
                yield column == value

    def _column(self, key):
        try:
            return self._table.c[key]
        except KeyError:
            raise ValueError(f"unknown column {key!r} for {self._table.name}") from None

    def _column_values(self, payload):
        values = {}
        for key, value in payload.items():
            column = self._column(key)
            if isinstance(value, uuid.UUID) and not isinstance(column.type, Uuid):
                value = str(value)
            values[key] = value
        return values

    def get_all(self):
        with self._reader() as session:
            return list(session.scalars(self._live()))

    def get_by_id(self, id_):
        """The live record with *id_*, or None."""
        with self._reader() as session:
            return session.scalars(self._live().where(self.model.id == id_)).first()

    def get_by_id_for_update(self, id_, tx):
        """Fetch and row-lock the live record with *id_* inside *tx*, or None."""
        stmt = self._live().where(self.model.id == id_).with_for_update()
        return tx.scalars(stmt).first()

    def get_by_ids(self, ids):
        with self._reader() as session:
            stmt = self._live().where(self.model.id.in_(list(ids)))
            return list(session.scalars(stmt))

    def paginate(self, filters, page, limit):
        """Records matching *filters*, newest id first, *limit* per page."""
        if limit < 0:
            raise ValueError("limit must not be negative")
        offset = (page - 1) * limit
        has_prev = page > 1
        if offset < 0:
            return Pagination(data=[], has_next=False, has_prev=has_prev)
        stmt = (
            self._live()
            .where(*self._conditions(filters))
            .order_by(self.model.id.desc())
            .limit(limit + 1)
            .offset(offset)
        )
        with self._reader() as session:
            records = list(session.scalars(stmt))
        has_next = len(records) > limit
        return Pagination(data=records[:limit], has_next=has_next, has_prev=has_prev)

    def create(self, entity, tx=None):
        with self._writing(tx) as session:
            session.add(entity)
            session.flush()
        return entity

    def create_bulk(self, entities, tx=None):
        """Insert *entities* in batches and return them."""
        entities = list(entities)
        pending = iter(entities)
        with self._writing(tx) as session:
            while batch := list(islice(pending, INSERT_BATCH_SIZE)):
                session.add_all(batch)
                session.flush()
        return entities

    def update(self, id_, entity, tx=None):
        """Copy the non-empty column values of *entity* onto the record *id_*."""
        payload = {}
        for attr in inspect(self.model).column_attrs:
            if attr.key == "id":
                continue
            value = getattr(entity, attr.key)
            if not _is_zero(value):
                payload[attr.columns[0].name] = value
        return self.update_with_map(id_, payload, tx)

    def update_bulk(self, ids, payload, tx=None):
        values = self._column_values(payload)
        if not values:
            return
        stmt = self._table.update().where(self._table.c.id.in_(list(ids))).values(values)
        with self._writing(tx) as session:
            session.execute(stmt)

    def update_with_map(self, id_, payload, tx=None):
        """Set the columns in *payload* on record *id_*; return it reloaded or None."""
        values = self._column_values(payload)
        with self._writing(tx) as session:
            if values:
                stmt = self._table.update().where(self._table.c.id == id_).values(values)
                session.execute(stmt)
            reload = (
                select(self.model)
                .where(self.model.id == id_)
                .execution_options(populate_existing=True)
            )
            return session.scalars(reload).first()

    def delete(self, id_, tx=None):
        with self._writing(tx) as session:
            entity = session.scalars(self._live().where(self.model.id == id_)).first()
            if entity is not None:
                session.delete(entity)

    def delete_bulk(self, ids, tx=None):
        stmt = self._table.delete().where(
            self._table.c.id.in_(list(ids)), self._table.c.deleted_at.is_(None)
        )
        with self._writing(tx) as session:
            session.execute(stmt)