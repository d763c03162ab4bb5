from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from triple_stub_generator.resolver import ImportedType, ResolvedType
from triple_stub_generator.schema_types import Method, stream_kind_of


@dataclass(frozen=True)
class ImportSpec:
    """An import of a generated file.

    Attributes:
        module_path: The module path to import, e.g. "github.com/x/common"
        alias: The name under which the module is referenced, e.g. "common"
    """

    module_path: str
    alias: str


@dataclass(frozen=True)
class ResolvedMethod:
    """A method whose request and response types are ready for textual substitution.

    Attributes:
        name: Name of the method
        request_type: Reference to the request type, e.g. "CreateReq" or "common.Status"
        response_type: Reference to the response type
        client_streaming: Whether the client streams requests
        server_streaming: Whether the server streams responses
    """

    name: str
    request_type: str
    response_type: str
    client_streaming: bool
    server_streaming: bool

    @classmethod
    def create(
        cls,
        method: Method,
        request: ResolvedType,
        response: ResolvedType,
        aliases: Mapping[str, str],
    ) -> ResolvedMethod:
        """Factory method to build a resolved method from its resolved types.

        Args:
            method: The schema method
            request: The resolved input type
            response: The resolved output type
            aliases: Module path to alias, must contain the module of every imported type

        Returns:
            A fully initialized ResolvedMethod
        """
        return cls(
            name=method.name,
            request_type=type_reference(request, aliases),
            response_type=type_reference(response, aliases),
            client_streaming=method.client_streaming,
            server_streaming=method.server_streaming,
        )

    @property
    def is_stream(self) -> bool:
        return self.client_streaming or self.server_streaming

    @property
    def stream_kind(self) -> str:
        return stream_kind_of(self.client_streaming, self.server_streaming)


@dataclass(frozen=True)
class ServiceContext:
    """A service with its resolved methods."""

    name: str
    methods: tuple[ResolvedMethod, ...]


@dataclass(frozen=True)
class FileContext:
    """Everything the templates need to render the stubs of one schema file.

    Attributes:
        source: Path of the schema file
        proto_package: The declared package of the schema file
        package_name: Name of the output package
        import_path: Module path of the schema file's own output
        file_name: Base name of the schema file, up to its first dot
        services: The services, in declaration order
        imports: The imported modules, in order of first use
        is_stream: Whether any method of the file streams
    """

    source: str
    proto_package: str
    package_name: str
    import_path: str
    file_name: str
    services: tuple[ServiceContext, ...]
    imports: tuple[ImportSpec, ...]
    is_stream: bool

    @property
    def import_paths(self) -> list[str]:
        """The imported module paths, in order of first use."""
        return [imp.module_path for imp in self.imports]

    @property
    def aliases(self) -> dict[str, str]:
        """Module path to alias for every import."""
        return {imp.module_path: imp.alias for imp in self.imports}

    def to_dict(self) -> dict[str, Any]:
        """Convert the context to plain, JSON-serializable data."""
        # asdict keeps tuples, JSON consumers expect lists
        data = asdict(self)
        data["imports"] = [asdict(imp) for imp in self.imports]
        data["services"] = [
            {
                "name": service.name,
                "methods": [{**asdict(method), "stream_kind": method.stream_kind} for method in service.methods],
            }
            for service in self.services
        ]
        return data


def type_reference(resolved: ResolvedType, aliases: Mapping[str, str]) -> str:
    """Build the textual reference to a resolved type.

    Imported types are prefixed by the alias of their module, e.g. `common.Status`;
    local types are referenced by their bare name.
    """
    if isinstance(resolved, ImportedType):
        return f"{aliases[resolved.module_path]}.{resolved.name}"
    return resolved.name
