"""Custom exceptions for extragrid viewport, navigation and patch handling."""

from __future__ import annotations

from collections.abc import Sequence


class ViewportError(Exception):
    """Base exception for request-level viewport errors.

    Every subclass carries a message that can be returned to the client as-is.
    """

    pass


class ValidationError(ViewportError):
    """Raised when a required parameter is missing or has an invalid value."""

    def __init__(self, message: str, parameters: Sequence[str] = ()) -> None:
        self.parameters = tuple(parameters)
        super().__init__(message)


class MissingParametersError(ValidationError):
    """Raised when one or more required parameters are absent.

    All missing names are reported together, in the order they were checked.
    """

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__("Missing: " + ", ".join(self.missing), self.missing)


class ParseError(ViewportError):
    """Raised when a selection, anchor, window or navigation token is malformed."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(reason)


class InvalidAnchorError(ViewportError):
    """Raised when an anchor is not legal for the kind of selection it is paired with."""

    def __init__(self, selection: object, anchor: object, allowed: Sequence[object]) -> None:
        self.selection = selection
        self.anchor = anchor
        self.allowed = tuple(allowed)
        names = ", ".join(str(a) for a in self.allowed)
        super().__init__(f"Invalid anchor {anchor} for {selection}, expected one of {names}")


class ScopeError(ViewportError):
    """Raised when a patch or range operation reaches outside what it addressed."""

    pass


class UnknownLabelError(ViewportError):
    """Raised when a label does not resolve to a stored mapping."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"Label not found: {label}")
