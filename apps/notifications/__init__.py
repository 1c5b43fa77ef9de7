"""Notifications app package.

Persists in-app notifications and sends best-effort emails about booking
lifecycle events and DJ moderation decisions.
"""
