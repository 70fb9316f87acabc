"""Exception classes for the document engine."""


class QuickboxError(Exception):
    """Base exception for engine errors."""

    pass


class PolicyViolation(QuickboxError):
    """Raised when header/footer content is edited while page 1 is not active."""

    def __init__(self, message: str = "Header and footer can only be edited on page 1"):
        super().__init__(message)


class DanglingReference(QuickboxError):
    """Raised when a box or page id no longer resolves in the document."""

    pass


class MalformedDocument(QuickboxError):
    """Raised when a persisted document cannot be parsed or has the wrong shape."""

    pass


class EmptyHistory(QuickboxError):
    """Raised by undo/redo when there is nothing to undo or redo."""

    pass
