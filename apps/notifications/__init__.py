"""Notifications app package.

Receives booking event snapshots from the message bus and hands them to
Celery for delivery. Delivery channels themselves are configured
outside this project.
"""
