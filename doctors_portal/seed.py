"""
seed.py
=======
Default treatment services for an empty database.
"""

import logging

from .store import Store

logger = logging.getLogger(__name__)

DEFAULT_SLOTS = [
    "08.00 AM - 08.30 AM",
    "08.30 AM - 09.00 AM",
    "09.00 AM - 09.30 AM",
    "09.30 AM - 10.00 AM",
    "10.00 AM - 10.30 AM",
    "10.30 AM - 11.00 AM",
    "11.00 AM - 11.30 AM",
    "11.30 AM - 12.00 PM",
    "04.00 PM - 04.30 PM",
    "04.30 PM - 05.00 PM",
    "05.00 PM - 05.30 PM",
    "05.30 PM - 06.00 PM",
]

DEFAULT_SERVICES = [
    "Teeth Orthodontics",
    "Cosmetic Dentistry",
    "Teeth Cleaning",
    "Cavity Protection",
    "Pediatric Dental",
    "Oral Surgery",
]


def seed_services(store: Store) -> int:
    """Insert the default services if none exist. Returns how many were added."""
    existing = store.services.list_all(projection=["name"])
    if existing:
        logger.info(f"{len(existing)} services already exist, skipping seed")
        return 0

    for name in DEFAULT_SERVICES:
        store.services.insert({"name": name, "slots": list(DEFAULT_SLOTS)})
    logger.info(f"Seeded {len(DEFAULT_SERVICES)} default services")
    return len(DEFAULT_SERVICES)
