"""Bookings app package.

Holds the booking lifecycle: the status state machine, the response
timeout sweep and the recovery suggestions offered to clients after a
booking is declined or expires.
"""
