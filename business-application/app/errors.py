"""Exceptions raised by the form engine for unknown categories, fields and collections."""

from __future__ import annotations


class FormEngineError(Exception):
    """Base class for programming errors raised by the form engine."""


class UnknownCategoryError(FormEngineError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown category: {self.key}"


class UnknownFieldError(FormEngineError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown field: {self.key}"


class UnknownCollectionError(FormEngineError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown collection: {self.name}"
