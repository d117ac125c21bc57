"""Campus operations backend.

Feature modules (schedules, gatekeeper) each carry their own model,
repository protocol, MySQL repository, service and thin Flask controller.
"""
