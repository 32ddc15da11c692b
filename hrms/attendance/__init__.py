"""Attendance module — daily clock-in / clock-out records, worked hours and API."""
