"""Payroll module — pay records, their workflow, validation and API."""
