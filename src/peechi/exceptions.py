"""Exception hierarchy for Peechi.

Handlers raise these; the interaction router turns them into a single
ephemeral reply using ``user_message``.
"""


class PeechiError(Exception):
    """Base exception for all application errors."""

    default_user_message = "Something went wrong. Please try again later."

    def __init__(self, message: str = "", *, user_message: str | None = None) -> None:
        super().__init__(message or user_message or self.default_user_message)
        # Internal details stay in the message; users only see text written for them.
        self.user_message = user_message or self.default_user_message


class ValidationError(PeechiError):
    """Malformed input to a handler (bad id format, out-of-range option)."""

    default_user_message = "That input is not valid."


class NotFoundError(PeechiError):
    """A referenced report, user, channel or role does not exist."""

    default_user_message = "The requested item could not be found."


class PersistenceError(PeechiError):
    """A backing-store operation failed. The side effect did not happen."""

    default_user_message = "Something went wrong saving your data. Please try again later."

    def __init__(self, message: str = "") -> None:
        # Store details go to the log, never to the user.
        super().__init__(message, user_message=self.default_user_message)


class ExternalServiceError(PeechiError):
    """An upstream platform or API call failed."""

    default_user_message = "An external service is unavailable right now. Please try again later."
