"""Error taxonomy shared across the bot."""


class BotinaError(Exception):
    """Base class for all bot errors."""


class ModelUnavailable(BotinaError):
    """The language model call failed or produced no usable text."""


class PersistenceUnavailable(BotinaError):
    """A user store could not be read or written."""


class InvalidUserInput(BotinaError):
    """User text could not be interpreted for the current step."""


class SchedulerUserDataIncomplete(BotinaError):
    """A user record lacks the data needed to compute reminders."""


class TransportConnectError(BotinaError):
    """The messaging transport could not be initialized within the retry budget."""
