"""Exceptions raised by the gateway.

Vendor and network failures are never raised; they are reported through
RetryResult. These cover programming errors detected before any
network activity.
"""


class GatewayError(Exception):
    """Base class for gateway errors."""


class InvalidRequestError(GatewayError):
    """The call cannot be constructed (missing key, model or body)."""


class MissingApiKeyError(InvalidRequestError):
    """No API key is configured for the requested provider."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"No API key configured for provider '{provider}'")
