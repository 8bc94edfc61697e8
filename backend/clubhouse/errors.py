"""Typed errors raised by the club services.

Every mutating service raises one of these with a message that can be shown
to the user as-is. Routes never catch them; the handler registered by
``register_error_handlers`` turns them into ``{"error": message}`` responses.
"""

from flask import jsonify


class ClubError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidInputError(ClubError):
    """Malformed schedule, negative or empty stat values, bad payloads."""


class InvalidScheduleError(InvalidInputError):
    pass


class ValidationError(InvalidInputError):
    """A ledger entry would drive an aggregate field below zero."""


class AlreadyNominatedError(InvalidInputError):
    pass


class DuplicatePendingError(ClubError):
    """An unresolved submission already exists for the same player and game."""

    status_code = 409


class DuplicateResultError(DuplicatePendingError):
    pass


class WindowClosedError(ClubError):
    """The action is only available while the last game is complete."""

    status_code = 403


class ConcurrencyConflictError(ClubError):
    """A conditional write lost to a concurrent writer; refetch and retry."""

    status_code = 409


class PermissionDeniedError(ClubError):
    status_code = 403


class NotFoundError(ClubError):
    status_code = 404


def register_error_handlers(app):
    @app.errorhandler(ClubError)
    def handle_club_error(exc):
        app.logger.info(f"[error] type={type(exc).__name__} message={exc.message}")
        return jsonify({'error': exc.message}), exc.status_code

