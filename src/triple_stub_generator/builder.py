"""Build the generation context of a single schema file."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from triple_stub_generator import helper
from triple_stub_generator.aliases import AliasTable
from triple_stub_generator.context_dto import FileContext, ImportSpec, ResolvedMethod, ServiceContext
from triple_stub_generator.errors import ConfigurationError
from triple_stub_generator.index import DescriptorIndex
from triple_stub_generator.resolver import ImportedType, ResolvedType, TypeResolver
from triple_stub_generator.schema_types import PACKAGE_SEPARATOR, SchemaFile, Service

logger = logging.getLogger(__name__)


class ContextBuilder:
    """A class that builds the generation context of one schema file.

    The builder owns the alias table and the import list of its file. Neither is shared with
    builders of other files, so files of one compilation unit can be built independently.
    """

    def __init__(
        self,
        schema_file: SchemaFile,
        index: DescriptorIndex,
        reserved_aliases: Iterable[str] = (),
    ):
        """Initialize the builder for a schema file.

        Args:
            schema_file (SchemaFile): The file to build the context for.
            index (DescriptorIndex): The index of the compilation unit that contains the file.
            reserved_aliases (Iterable[str], optional): Names that imports may not be aliased to. Defaults to ().
        """
        self._file = schema_file
        self._resolver = TypeResolver(index)
        self._alias_table = AliasTable(reserved_aliases)
        self._import_paths: list[str] = []

    @property
    def imports(self) -> list[ImportSpec]:
        """The imports that were registered so far, in order of first use."""
        return [ImportSpec(module_path=path, alias=self._alias_table.alias_for(path)) for path in self._import_paths]

    def _add_import(self, module_path: str) -> str:
        """Register an imported module path and get its alias.

        Args:
            module_path (str): The module path to import.

        Returns:
            str: The alias of the module.
        """
        # Preserve insertion order while avoiding duplicates
        if module_path not in self._import_paths:
            self._import_paths.append(module_path)
            logger.debug("'%s' imports '%s'.", self._file.path, module_path)

        return self._alias_table.alias_for(module_path)

    def resolve(self, type_name: str) -> ResolvedType:
        """Resolve a type name of this file and register its import, if it has one.

        Args:
            type_name (str): The dotted type name.

        Returns:
            ResolvedType: The resolved type.
        """
        resolved = self._resolver.resolve(type_name, self._file)

        if isinstance(resolved, ImportedType):
            self._add_import(resolved.module_path)

        return resolved

    def _package_name(self) -> str:
        """Determine the name of the output package.

        An explicit name in the module hint wins. A bare import path gives the sanitized last element
        of the path, e.g. `github.com/x/shop` gives `shop`. Without a usable hint, the declared package
        is used with its dots replaced by underscores.

        Raises:
            ConfigurationError: If the module hint is malformed, or if no package name can be determined.

        Returns:
            str: The package name.
        """
        try:
            hint = helper.parse_module_hint(self._file.module_hint)
        except ValueError as e:
            raise ConfigurationError(self._file.path, str(e)) from e

        if hint is not None:
            if hint.package_name is not None:
                return hint.package_name

            # Same name as the generated message code next to the stubs
            package_name = helper.package_name_from_import_path(hint.import_path)
            if helper.is_identifier(package_name):
                return package_name

        if not self._file.package:
            raise ConfigurationError(
                self._file.path,
                "need to set the package name in the module hint, or declare a package",
            )

        package_name = self._file.package.replace(PACKAGE_SEPARATOR, "_")
        if not helper.is_identifier(package_name):
            raise ConfigurationError(
                self._file.path,
                f"package '{self._file.package}' does not give a valid package name, set one in the module hint",
            )

        return package_name

    def _build_service(self, service: Service) -> ServiceContext:
        methods: list[ResolvedMethod] = []

        for method in service.methods:
            request = self.resolve(method.input_type)
            response = self.resolve(method.output_type)
            methods.append(ResolvedMethod.create(method, request, response, self._alias_table.aliases))

        return ServiceContext(name=service.name, methods=tuple(methods))

    def build(self) -> FileContext:
        """Build the context of the file.

        Services are visited in declaration order, and so are their methods. The input type of a
        method is resolved before its output type. This fixes the order of the imports.

        Raises:
            ConfigurationError: If the file has no valid output naming directive.

        Returns:
            FileContext: The context.
        """
        package_name = self._package_name()

        services = tuple(self._build_service(service) for service in self._file.services)

        context = FileContext(
            source=self._file.path,
            proto_package=self._file.package,
            package_name=package_name,
            import_path=helper.module_path_for(self._file),
            file_name=helper.file_stem(self._file.path),
            services=services,
            imports=tuple(self.imports),
            is_stream=any(method.is_stream for service in self._file.services for method in service.methods),
        )

        logger.info(
            "Built context for '%s' with %d service(s) and %d import(s).",
            self._file.path,
            len(context.services),
            len(context.imports),
        )
        return context


def build_context(
    schema_file: SchemaFile,
    index: DescriptorIndex,
    reserved_aliases: Iterable[str] = (),
) -> FileContext:
    """Entry-point for building the context of a single schema file.

    Args:
        schema_file (SchemaFile): The file to build the context for.
        index (DescriptorIndex): The index of the compilation unit.
        reserved_aliases (Iterable[str], optional): Names that imports may not be aliased to. Defaults to ().

    Returns:
        FileContext: The context.
    """
    return ContextBuilder(schema_file, index, reserved_aliases).build()
