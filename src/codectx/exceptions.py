"""Custom exceptions for codectx."""


class CodeCtxError(Exception):
    """Base exception for all codectx errors."""


class ConfigError(CodeCtxError):
    """Configuration-related errors."""


class ProjectRootError(CodeCtxError):
    """The project root cannot be walked or a path cannot be made relative to it."""


class PrimaryFileError(CodeCtxError):
    """The explicitly requested file could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot read '{path}': {reason}")


class OperationCancelledError(CodeCtxError):
    """Raised when a caller cancels a walk or an assembly in progress."""
