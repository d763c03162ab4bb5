"""Resolution of dotted type names to local or imported type references."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import override

from triple_stub_generator import helper
from triple_stub_generator.index import DescriptorIndex
from triple_stub_generator.schema_types import PACKAGE_SEPARATOR, SchemaFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalType:
    """A type that lives in the output package of the current file."""

    name: str

    @override
    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ImportedType:
    """A type that lives in the output module of a dependency."""

    module_path: str
    name: str

    @override
    def __str__(self) -> str:
        return f"{self.module_path}.{self.name}"


ResolvedType = LocalType | ImportedType


class TypeResolver:
    """Resolves type names, as they appear in method signatures, against a compilation unit."""

    def __init__(self, index: DescriptorIndex):
        """Initialize the resolver.

        Args:
            index (DescriptorIndex): The index of the compilation unit to resolve against.
        """
        self._index = index

    def resolve(self, type_name: str, current: SchemaFile) -> ResolvedType:
        """Resolve a dotted type name from the point of view of a schema file.

        Candidate packages are tried from the longest dotted prefix down to the shortest, so the most
        specific package wins. A prefix matches, if it is the package of `current`, or if it is the
        package of a file that `current` declares as a dependency. A package that is known, but not
        imported by `current`, is skipped.

        If no prefix matches, the last segment is returned as a local name. This is a best-effort
        fallback, and no error is raised.

        Args:
            type_name (str): The type name, e.g. `.shop.common.Status`.
            current (SchemaFile): The file in which the reference occurs.

        Returns:
            ResolvedType: The resolved reference.
        """
        segments = type_name.lstrip(PACKAGE_SEPARATOR).split(PACKAGE_SEPARATOR)

        if len(segments) == 1:
            return LocalType(helper.exported_name(segments[0]))

        for split_at in range(len(segments) - 1, 0, -1):
            resolved = self._resolve_against_prefix(segments, split_at, current)
            if resolved is not None:
                return resolved

        logger.debug("Could not resolve '%s' in '%s', falling back to a local name.", type_name, current.path)
        return LocalType(helper.exported_name(segments[-1]))

    def _resolve_against_prefix(self, segments: list[str], split_at: int, current: SchemaFile) -> ResolvedType | None:
        """Try to resolve a type by treating its first `split_at` segments as the package.

        Args:
            segments (list[str]): The segments of the type name.
            split_at (int): The number of segments that form the candidate package.
            current (SchemaFile): The file in which the reference occurs.

        Returns:
            ResolvedType | None: The resolved reference, or None if the candidate package does not match.
        """
        package = PACKAGE_SEPARATOR.join(segments[:split_at])
        name = helper.local_type_name(segments[split_at:])

        if package == current.package:
            return LocalType(name)

        dependency = self._index.file_for_package(package)
        if dependency is None:
            return None

        if not current.depends_on(dependency.path):
            logger.debug(
                "Package '%s' is defined in '%s', which '%s' does not import.", package, dependency.path, current.path
            )
            return None

        module_path = helper.module_path_for(dependency)
        if module_path == helper.module_path_for(current):
            # Same output module, no import needed.
            return LocalType(name)

        return ImportedType(module_path=module_path, name=name)
