"""
availability.py
===============
Open-slot computation for a given day.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List


def compute_availability(
    services: Iterable[Dict[str, Any]],
    bookings: Iterable[Dict[str, Any]],
    date: str,
) -> List[Dict[str, Any]]:
    """
    Remove already-booked slots from every service for `date`.

    Args:
        services: Service documents, each with `name` and ordered `slots`
        bookings: Booking documents (any dates; only `date` ones count)
        date: Requested day, compared verbatim with `booking["date"]`

    Returns:
        Copies of the services in input order, with `slots` filtered but
        kept in their configured order. Inputs are left untouched.
    """
    booked = defaultdict(set)
    for booking in bookings:
        if booking.get("date") == date:
            booked[booking.get("treatment")].add(booking.get("slot"))

    available = []
    for service in services:
        taken = booked.get(service.get("name"), set())
        available.append({
            **service,
            "slots": [slot for slot in service.get("slots") or [] if slot not in taken],
        })
    return available
