from typing import Optional


class OrderBridgeError(Exception):
    """Base class for errors raised while handling a checkout or webhook."""


class ConfigurationError(OrderBridgeError):
    pass


class SubmissionError(OrderBridgeError):
    pass


class ProviderError(OrderBridgeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
