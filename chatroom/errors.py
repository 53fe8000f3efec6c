"""Errors raised by the registry and the message log.

Each error carries the HTTP status it is reported with; the app turns them
into ``{'error': why}`` JSON bodies.
"""


class ChatError(Exception):
    status_code = 500

    def __init__(self, why: str = 'internal error'):
        super().__init__(why)
        self.why = why


class ValidationError(ChatError):
    status_code = 422


class Conflict(ChatError):
    status_code = 409


class NotFound(ChatError):
    status_code = 404


class Unauthorized(ChatError):
    status_code = 401


class StoreError(ChatError):
    status_code = 500
