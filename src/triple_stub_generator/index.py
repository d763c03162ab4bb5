"""Lookup structures over all schema files of a compilation unit."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from triple_stub_generator.schema_types import SchemaFile

logger = logging.getLogger(__name__)


def build_package_index(files: Iterable[SchemaFile]) -> dict[str, SchemaFile]:
    """Map every declared package name to the file that defines it.

    Several files may declare the same package. In that case the file that comes last in `files`
    wins. This is a known limitation: types of a shared package are only found through the last
    file that declares it.

    Files without a package are not indexed.

    Args:
        files (Iterable[SchemaFile]): All files of the compilation unit.

    Returns:
        dict[str, SchemaFile]: The package index.
    """
    index: dict[str, SchemaFile] = {}

    for schema_file in files:
        if not schema_file.package:
            continue

        previous = index.get(schema_file.package)
        if previous is not None and previous.path != schema_file.path:
            logger.debug(
                "Package '%s' is declared by '%s' and '%s', using the latter.",
                schema_file.package,
                previous.path,
                schema_file.path,
            )

        index[schema_file.package] = schema_file

    return index


def build_path_index(files: Iterable[SchemaFile]) -> dict[str, SchemaFile]:
    """Map every file path to its file."""
    return {schema_file.path: schema_file for schema_file in files}


@dataclass(frozen=True)
class DescriptorIndex:
    """Read-only package and path indexes of a compilation unit.

    Built once per run and shared by every resolution.
    """

    packages: Mapping[str, SchemaFile]
    paths: Mapping[str, SchemaFile]

    @classmethod
    def build(cls, files: Iterable[SchemaFile]) -> DescriptorIndex:
        """Build both indexes from the files of a compilation unit.

        Args:
            files (Iterable[SchemaFile]): All files of the compilation unit, in input order.

        Returns:
            DescriptorIndex: The index.
        """
        files = list(files)
        return cls(
            packages=MappingProxyType(build_package_index(files)),
            paths=MappingProxyType(build_path_index(files)),
        )

    def file_for_package(self, package: str) -> SchemaFile | None:
        """Look up the file that defines a package, if any."""
        return self.packages.get(package)

    def file_for_path(self, path: str) -> SchemaFile | None:
        """Look up a file by its path, if known."""
        return self.paths.get(path)
