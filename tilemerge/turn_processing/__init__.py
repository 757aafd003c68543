"""Input acceptance helpers.

Centralizes the phase rules for incoming actions so the session, the API and the CLI
all drop out-of-phase input the same way.
"""
