"""
store.py
========
Document-style repository over the portal tables.

Each `Collection` exposes the small set of operations the API needs
(list_all, find_one, insert, update, delete) and speaks plain dicts:
fixed columns plus whatever free-form fields live in the `extra` JSON
column, with the primary key surfaced as `_id`.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import Booking, Doctor, Role, Service, User

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class Collection:
    """Dict-in, dict-out access to one ORM model."""

    def __init__(self, session: Session, model):
        self.session = session
        self.model = model
        self.columns = {
            c.name for c in model.__table__.columns if c.name not in ("id", "extra")
        }

    # -----------------------------------------------------------------------
    # Conversion helpers
    # -----------------------------------------------------------------------

    def to_document(self, row) -> Document:
        doc = {"_id": row.id}
        for name in sorted(self.columns):
            doc[name] = getattr(row, name)
        if "role" in doc:
            doc["role"] = Role.from_value(doc["role"]).value
        doc.update(row.extra or {})
        return doc

    def _split(self, fields: Document) -> Tuple[Document, Document]:
        """Separate column-backed fields from free-form ones."""
        columns, extra = {}, {}
        for key, value in fields.items():
            if key == "_id":
                continue
            if key in self.columns:
                columns[key] = value
            else:
                extra[key] = value
        return columns, extra

    def _query(self, filter: Optional[Document]):
        # Reads always reflect the database, not rows cached by this session
        query = self.session.query(self.model).populate_existing()
        for key, value in (filter or {}).items():
            if key == "_id":
                query = query.filter(self.model.id == value)
            elif key in self.columns:
                query = query.filter(getattr(self.model, key) == value)
            else:
                raise ValueError(f"cannot filter {self.model.__tablename__} on '{key}'")
        return query.order_by(self.model.id)

    # -----------------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------------

    def list_all(self, filter: Optional[Document] = None, projection: Optional[List[str]] = None) -> List[Document]:
        docs = [self.to_document(row) for row in self._query(filter).all()]
        if projection is None:
            return docs
        keep = {"_id", *projection}
        return [{k: v for k, v in doc.items() if k in keep} for doc in docs]

    def find_one(self, filter: Document) -> Optional[Document]:
        row = self._query(filter).first()
        return self.to_document(row) if row is not None else None

    def insert(self, record: Document) -> int:
        columns, extra = self._split(record)
        row = self.model(**columns, extra=extra)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row.id

    def update(self, filter: Document, patch: Document, upsert: bool = False) -> Document:
        """
        Apply `patch` to the first record matching `filter`.

        Only fields named in the patch change; free-form fields are merged.
        With `upsert=True` and no match, a record is built from filter + patch.
        """
        row = self._query(filter).first()
        if row is None:
            if not upsert:
                return {"acknowledged": True, "matchedCount": 0, "modifiedCount": 0, "upsertedId": None}
            try:
                new_id = self.insert({**filter, **patch})
                return {"acknowledged": True, "matchedCount": 0, "modifiedCount": 0, "upsertedId": new_id}
            except IntegrityError:
                # A concurrent upsert created the record after our lookup
                self.session.rollback()
                row = self._query(filter).first()
                if row is None:
                    raise
                logger.info(f"Upsert race lost on {self.model.__tablename__}; patching existing record")

        modified = self._apply_patch(row, patch)
        self.session.commit()
        return {
            "acknowledged": True,
            "matchedCount": 1,
            "modifiedCount": 1 if modified else 0,
            "upsertedId": None,
        }

    def _apply_patch(self, row, patch: Document) -> bool:
        columns, extra = self._split(patch)
        modified = False
        for key, value in columns.items():
            if getattr(row, key) != value:
                setattr(row, key, value)
                modified = True
        if extra:
            merged = {**(row.extra or {}), **extra}
            if merged != row.extra:
                # JSON columns only track reassignment
                row.extra = merged
                modified = True
        return modified

    def delete(self, filter: Document) -> Document:
        row = self._query(filter).first()
        if row is None:
            return {"acknowledged": True, "deletedCount": 0}
        self.session.delete(row)
        self.session.commit()
        return {"acknowledged": True, "deletedCount": 1}


class Store:
    """The four portal collections sharing one session."""

    def __init__(self, session: Session):
        self.session = session
        self.services = Collection(session, Service)
        self.bookings = Collection(session, Booking)
        self.users = Collection(session, User)
        self.doctors = Collection(session, Doctor)

    def create_booking(self, booking: Document) -> Tuple[bool, Any]:
        """
        Insert a booking unless the patient already has one for the same
        treatment and date.

        Returns (True, inserted_id) or (False, existing_booking).
        """
        query = {
            "treatment": booking.get("treatment"),
            "date": booking.get("date"),
            "patient": booking.get("patient"),
        }
        existing = self.bookings.find_one(query)
        if existing:
            logger.info(f"Duplicate booking for {query['patient']} ({query['treatment']} on {query['date']})")
            return False, existing

        try:
            inserted_id = self.bookings.insert(booking)
        except IntegrityError:
            # A concurrent request inserted the same triple after our check
            self.session.rollback()
            existing = self.bookings.find_one(query)
            if existing is None:
                raise
            logger.info(f"Booking race lost for {query['patient']}; returning existing booking")
            return False, existing

        logger.info(f"Booked {query['treatment']} on {query['date']} for {query['patient']}")
        return True, inserted_id

    def close(self):
        self.session.close()
