# app/queue/errors.py


class QueueError(Exception):
    """Base class for failures the queue controller reports to its caller."""

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(self.default_message if message is None else message)


class ValidationError(QueueError):
    default_message = "Invalid ticket data"


class GuardError(QueueError):
    default_message = "Another ticket action is already in progress."


class EligibilityError(QueueError):
    default_message = "No open tickets available to assign."


class StoreError(QueueError):
    default_message = "Ticket store request failed"


class NotFoundError(StoreError):
    default_message = "Ticket not found"


class ConflictError(StoreError):
    default_message = "Ticket was changed by someone else"


class TransientError(StoreError):
    default_message = "Ticket store is unavailable. Please try again."
