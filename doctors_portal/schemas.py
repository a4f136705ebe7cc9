"""
schemas.py
==========
Pydantic models used for validating incoming request bodies.
Responses are plain store documents, so they have no models here.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class BookingRequest(BaseModel):
    """Request body for booking an appointment."""
    model_config = ConfigDict(extra="allow")

    treatment: str
    date: str
    slot: str
    patient: str
    treatmentId: Optional[Union[int, str]] = None
    patientName: Optional[str] = None
    phone: Optional[str] = None


class UserProfile(BaseModel):
    """Profile fields sent when a user signs in or registers."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None

    def patch(self) -> dict:
        """Fields to write; identity and role are never client-settable."""
        fields = self.model_dump(exclude_none=True)
        fields.pop("email", None)
        fields.pop("role", None)
        fields.pop("_id", None)
        return fields


class DoctorRequest(BaseModel):
    """Request body for adding a doctor."""
    model_config = ConfigDict(extra="allow")

    email: str
    name: Optional[str] = None
    specialty: Optional[str] = None
    img: Optional[str] = None
