"""Exceptions raised on caller contract violations."""


class InvalidArgumentError(ValueError):
    """An argument lies outside the set of values a classifier accepts."""
