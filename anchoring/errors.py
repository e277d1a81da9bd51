"""Errors raised while creating or resolving anchors."""


class AnchorError(Exception):
    """Base error for anchors that cannot be created or resolved."""


class MissingParameterError(AnchorError):
    """Raised when a required anchor field is absent."""

    def __init__(self, parameter: str, context: str = "") -> None:
        """Initialize the error.

        Args:
            parameter: Name of the missing field (e.g. "id", "quote")
            context: Additional context about where the field was needed
        """
        self.parameter = parameter
        msg = f"Missing required parameter '{parameter}'"
        if context:
            msg = f"{msg} for {context}"
        super().__init__(msg)


class DomLookupError(AnchorError):
    """Raised when a referenced node does not exist in the document."""


class NoMatchFoundError(AnchorError):
    """Raised when quote-based resolution finds no candidate."""


class OutOfRangeError(AnchorError, IndexError):
    """Raised when an offset or range lies outside the coordinate space."""
