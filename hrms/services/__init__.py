"""Business services for the HRMS API."""
