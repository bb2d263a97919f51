"""Bookings app package.

Holds the care booking domain (the Booking aggregate with its policies,
services and events), the use cases that drive it, and the Django
persistence that rebuilds aggregates through `reconstitute`.
"""
