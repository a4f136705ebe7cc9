"""
main.py
========
This is the FastAPI entry point for the Doctors Portal backend.
It:
 - Initializes the database and seeds default treatment services.
 - Exposes REST API endpoints for services, availability, bookings,
   users and doctors.
 - Gates private routes behind token and admin-role guards.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .availability import compute_availability
from .db import SessionLocal, get_store, init_db
from .errors import Forbidden, register_exception_handlers
from .guards import AccessContext, get_token_service, require_admin_user, require_user
from .logging_config import setup_logging
from .models import Base, Role
from .schemas import BookingRequest, DoctorRequest, UserProfile
from .seed import seed_services
from .store import Store
from .tokens import TokenService

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# APP STARTUP
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Runs when FastAPI starts.
    Creates missing tables and seeds the default services.
    """
    logger.info("Starting Doctors Portal backend...")
    init_db(Base)

    if config.SEED_SERVICES:
        store = Store(SessionLocal())
        try:
            seed_services(store)
        finally:
            store.close()
    yield
    logger.info("Doctors Portal backend stopped")


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(title="Doctors Portal Backend", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# ---------------------------------------------------------------------------
# SERVICES & AVAILABILITY
# ---------------------------------------------------------------------------

@app.get("/services")
def api_list_services(store: Store = Depends(get_store)):
    """All treatment services, names only."""
    return store.services.list_all(projection=["name"])


@app.get("/available")
def api_available_slots(date: Optional[str] = None, store: Store = Depends(get_store)):
    """
    Every service with the slots still free on `date`.
    """
    bookings = store.bookings.list_all({"date": date})
    services = store.services.list_all()
    return compute_availability(services, bookings, date)


# ---------------------------------------------------------------------------
# BOOKINGS
# ---------------------------------------------------------------------------

@app.get("/booking")
def api_patient_bookings(patient: Optional[str] = None, context: AccessContext = Depends(require_user)):
    """
    Appointments of the logged-in patient.
    The `patient` query must match the token's email.
    """
    if patient != context.email:
        raise Forbidden(reason=f"{context.email} asked for bookings of {patient}")
    return context.store.bookings.list_all({"patient": patient})


@app.post("/booking")
def api_create_booking(booking: BookingRequest, store: Store = Depends(get_store)):
    """
    Book an appointment.

    A patient gets at most one booking per treatment per day; a repeat
    request returns the existing booking with `success: false`.
    """
    created, outcome = store.create_booking(booking.model_dump(exclude_none=True))
    if not created:
        return {"success": False, "booking": outcome}
    return {"success": True, "result": {"acknowledged": True, "insertedId": outcome}}


# ---------------------------------------------------------------------------
# USERS
# ---------------------------------------------------------------------------

@app.get("/users")
def api_list_users(context: AccessContext = Depends(require_user)):
    return context.store.users.list_all()


@app.get("/admin/{email}")
def api_is_admin(email: str, context: AccessContext = Depends(require_user)):
    """Whether `email` holds the admin role. Unknown emails are not admins."""
    user = context.store.users.find_one({"email": email})
    role = Role.from_value(user.get("role")) if user else Role.regular
    return {"admin": role is Role.admin}


@app.put("/users/admin/{email}")
def api_make_admin(email: str, context: AccessContext = Depends(require_admin_user)):
    """Promote an existing user to admin (no upsert)."""
    result = context.store.users.update({"email": email}, {"role": Role.admin})
    logger.info(f"{context.email} promoted {email} to admin (matched={result['matchedCount']})")
    return result


@app.put("/users/{email}")
def api_upsert_user(
    email: str,
    profile: UserProfile,
    store: Store = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Create or update a user profile and hand back a fresh access token.
    """
    result = store.users.update({"email": email}, profile.patch(), upsert=True)
    token = tokens.issue(email)
    return {"result": result, "token": token}


# ---------------------------------------------------------------------------
# DOCTORS (admin only)
# ---------------------------------------------------------------------------

@app.get("/doctors")
def api_list_doctors(context: AccessContext = Depends(require_admin_user)):
    return context.store.doctors.list_all()


@app.post("/doctor")
def api_add_doctor(doctor: DoctorRequest, context: AccessContext = Depends(require_admin_user)):
    """Add a doctor. An email that is already registered is not inserted twice."""
    existing = context.store.doctors.find_one({"email": doctor.email})
    if existing:
        return {"acknowledged": False, "doctor": existing}
    inserted_id = context.store.doctors.insert(doctor.model_dump(exclude_none=True))
    logger.info(f"{context.email} added doctor {doctor.email}")
    return {"acknowledged": True, "insertedId": inserted_id}


@app.delete("/doctors/{email}")
def api_delete_doctor(email: str, context: AccessContext = Depends(require_admin_user)):
    result = context.store.doctors.delete({"email": email})
    logger.info(f"{context.email} deleted doctor {email} (deleted={result['deletedCount']})")
    return result


# ---------------------------------------------------------------------------
# ROOT ENDPOINT
# ---------------------------------------------------------------------------

@app.get("/")
def root():
    """Basic health check endpoint."""
    return {"message": "Doctors Portal server is running!"}


# Convenience: allow running via `python -m doctors_portal.main`
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("doctors_portal.main:app", host=config.HOST, port=config.PORT)
