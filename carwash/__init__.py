"""
Car-wash booking backend: customers, services, timeslots and bookings.
"""

__version__ = "0.1.0"
