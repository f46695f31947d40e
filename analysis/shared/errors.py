"""
Error types for the deviation monitor.
"""


class DeviationMonitorError(Exception):
    """Base error for the deviation monitor."""


class MalformedTickError(DeviationMonitorError):
    """Inbound tick payload could not be turned into a price."""

    def __init__(self, reason: str, payload: object = None):
        super().__init__(reason)
        self.reason = reason
        self.payload = payload


class InvalidQuoteError(DeviationMonitorError):
    """Oracle quote is not a usable price."""
