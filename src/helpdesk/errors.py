"""Exception taxonomy for exchanges."""


class HelpdeskError(Exception):
    """Base class for all helpdesk errors."""


class ValidationError(HelpdeskError):
    """The request was rejected before any state was touched."""


class ExchangeError(HelpdeskError):
    """An exchange failed; no new turn was recorded."""


class GatewayError(ExchangeError):
    """The model backend failed or returned something unusable."""


class StorageError(ExchangeError):
    """History or memory I/O failed."""


class ExchangeTimeoutError(ExchangeError):
    """The exchange exceeded its wall-clock budget."""
