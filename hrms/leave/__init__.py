"""Leave module — leave requests, their workflow, validation and API."""
