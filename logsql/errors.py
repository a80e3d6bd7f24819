from typing import Optional


class ConfigurationError(ValueError):
    """Raised while building a sink from invalid options."""


class SinkError(Exception):
    pass


class AcquisitionError(SinkError):
    def __init__(self, message: str, original: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original = original


class ExecutionError(SinkError):
    def __init__(self, message: str, original: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original = original
