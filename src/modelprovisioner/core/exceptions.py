class ProvisionerError(Exception):
    """Base class for all custom exceptions in the model provisioner."""

    pass


class InvalidPatternError(ProvisionerError):
    """Raised when a backend filter or override pattern cannot be compiled.

    Attributes:
        backend (str): Name of the backend carrying the pattern.
        pattern (str): The offending regular expression.
    """

    def __init__(self, *, backend: str, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r} for backend '{backend}': {reason}")
        self.backend: str = backend
        self.pattern: str = pattern
        self.reason: str = reason


class BackendAPIError(ProvisionerError):
    """Raised when a backend inventory call fails."""

    def __init__(self, *, backend_url: str, reason: str) -> None:
        super().__init__(f"Backend request to {backend_url} failed: {reason}")
        self.backend_url: str = backend_url
        self.reason: str = reason


class GatewayAPIError(ProvisionerError):
    """Raised when a gateway management call fails.

    Attributes:
        operation (str): Gateway operation that failed (``list``, ``add``, ``delete``).
        status_code (Optional[int]): HTTP status when a response was received.
    """

    def __init__(
        self, *, operation: str, reason: str, status_code: int | None = None
    ) -> None:
        message = f"Gateway {operation} failed: {reason}"
        if status_code is not None:
            message = f"Gateway {operation} failed with status {status_code}: {reason}"
        super().__init__(message)
        self.operation: str = operation
        self.reason: str = reason
        self.status_code: int | None = status_code


class CycleAbortedError(ProvisionerError):
    """Raised when a reconciliation cycle cannot proceed at all."""

    def __init__(self, *, stage: str, reason: str) -> None:
        super().__init__(f"Cycle aborted during {stage}: {reason}")
        self.stage: str = stage
        self.reason: str = reason


__all__ = [
    "ProvisionerError",
    "InvalidPatternError",
    "BackendAPIError",
    "GatewayAPIError",
    "CycleAbortedError",
]
