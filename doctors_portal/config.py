"""
config.py
=========
Environment-driven settings for the doctors portal backend.
Values are read once at import time; a local `.env` file is honoured.
"""

import os
import warnings

from dotenv import load_dotenv

load_dotenv()

# Database (SQLite file by default, any SQLAlchemy URL otherwise)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/doctors_portal.db")

# Token signing
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
if not ACCESS_TOKEN_SECRET:
    warnings.warn(
        "ACCESS_TOKEN_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    ACCESS_TOKEN_SECRET = "INSECURE-DEV-SECRET-CHANGE-ME"  # noqa: S105

ACCESS_TOKEN_EXPIRES_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRES_MINUTES", "60"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

SEED_SERVICES = os.getenv("SEED_SERVICES", "true").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
