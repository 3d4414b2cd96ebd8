"""Elicitation error classes."""


class ElicitationError(Exception):
    """Base exception for elicitation errors."""

    pass


class ElicitationUnsupportedError(ElicitationError):
    """The connected client did not declare the elicitation capability."""

    pass
