"""Geo Attendance package.

On-device presence tracking: a geofence evaluator plus a durable attendance
ledger, organized by feature modules (geofence, tracking, storage, ...) with a
thin Flask controller layer on top.
"""
