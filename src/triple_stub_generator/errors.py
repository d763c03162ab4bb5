"""Exceptions raised by the stub generator."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, override

if TYPE_CHECKING:
    from triple_stub_generator.context_dto import FileContext


class ConfigurationError(Exception):
    """Raised when a schema file lacks a valid output naming directive."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message

        super().__init__(str(self))

    @override
    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class OptionsError(ValueError):
    """Raised when generator options or plugin parameters are malformed."""

    pass


class GenerationError(Exception):
    """Raised after a run in which at least one file could not be processed.

    Holds every per-file error, as well as the contexts of all files that were built successfully.
    """

    def __init__(self, errors: Sequence[ConfigurationError], contexts: Sequence[FileContext] = ()) -> None:
        self.errors = list(errors)
        self.contexts = list(contexts)

        super().__init__(str(self))

    @override
    def __str__(self) -> str:
        lines = [f"processing {error.path}: {error.message}" for error in self.errors]
        if len(lines) == 1:
            return lines[0]
        return "multiple errors occurred:\n" + "\n".join(lines)
