"""Club domain services: schedule, game clock, lifecycle, stats ledger,
submission review and post-game actions.

This package contains the domain logic imported by HTTP routes, socket
handlers and CLI commands, keeping transport concerns separated from the
rules themselves. The schedule, clock and lifecycle modules are pure; the
rest read and write through the SQLAlchemy session.
"""
