"""
models.py
=========
SQLAlchemy ORM models for the doctors portal.
Contains tables for:
 - Service (treatments and their daily slot list)
 - Booking
 - User
 - Doctor

Each table has an `extra` JSON column for free-form fields sent by the
portal frontend, so records behave like flexible documents.
"""

import enum

from sqlalchemy import JSON, Column, Enum, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

# SQLAlchemy Base class
Base = declarative_base()

# ---------------------------------------------------------------------------
# ENUM DEFINITIONS
# ---------------------------------------------------------------------------

class Role(str, enum.Enum):
    """Authorization role of a portal user."""
    regular = "regular"
    admin = "admin"

    @classmethod
    def from_value(cls, value) -> "Role":
        """Map a stored role (possibly missing or unknown) onto a Role."""
        if isinstance(value, Role):
            return value
        return cls.admin if value == cls.admin.value else cls.regular


# ---------------------------------------------------------------------------
# TABLE DEFINITIONS
# ---------------------------------------------------------------------------

class Service(Base):
    """A bookable treatment with a fixed, ordered list of daily slots."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    slots = Column(JSON, nullable=False, default=list)
    extra = Column(JSON, nullable=False, default=dict)


class Booking(Base):
    """One patient appointment for a treatment on a given day."""
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("patient", "treatment", "date", name="uq_booking_patient_treatment_date"),
    )

    id = Column(Integer, primary_key=True)
    patient = Column(String, nullable=False, index=True)
    treatment = Column(String, nullable=False)
    date = Column(String, nullable=False, index=True)
    slot = Column(String, nullable=False)
    extra = Column(JSON, nullable=False, default=dict)


class User(Base):
    """Portal account, keyed by email. A NULL role means a regular user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    role = Column(Enum(Role), nullable=True)
    extra = Column(JSON, nullable=False, default=dict)


class Doctor(Base):
    """Doctor profile managed by admins."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=True)
    specialty = Column(String, nullable=True)
    img = Column(String, nullable=True)
    extra = Column(JSON, nullable=False, default=dict)
