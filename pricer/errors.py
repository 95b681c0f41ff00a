"""Error classes for price resolution.

`CallReverted` signals chain data that is unavailable at a block and is
recovered by the handlers. The other errors indicate a caller or
configuration bug and are never retried.
"""


class PricingError(Exception):
    """Base error for price resolution."""

    pass


class CallReverted(PricingError):
    """A contract read reverted or the contract does not exist at the block."""

    def __init__(self, address: str, method: str, reason: str | None = None):
        self.address = address
        self.method = method
        self.reason = reason
        message = f"{method} reverted on {address}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TokenNotInVenueError(PricingError):
    """A handler was asked about a token outside its configured token set."""

    def __init__(self, handler_id: str, token: str):
        self.handler_id = handler_id
        self.token = token
        super().__init__(f"Token {token} is not handled by venue {handler_id}")


class OperationNotSupportedError(PricingError):
    """The venue does not implement the requested operation."""

    def __init__(self, handler_id: str, operation: str):
        self.handler_id = handler_id
        self.operation = operation
        super().__init__(f"{operation} is not supported by venue {handler_id}")


class ConfigurationError(PricingError):
    """Venue or service configuration is invalid."""

    pass


__all__ = [
    "PricingError",
    "CallReverted",
    "TokenNotInVenueError",
    "OperationNotSupportedError",
    "ConfigurationError",
]
