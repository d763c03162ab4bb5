"""Types and constants that are common to all schema files of a compilation unit."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

PACKAGE_SEPARATOR = "."
MODULE_PATH_SEPARATOR = "/"
MODULE_HINT_SEPARATOR = ";"
NESTED_NAME_SEPARATOR = "_"
SCHEMA_SUFFIX = ".proto"

# Keywords of the generated target language. Aliases and package names may never be one of these.
RESERVED_WORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)


class StreamKind:
    """Kinds of RPC methods, by their streaming flags."""

    UNARY = "unary"
    CLIENT_STREAM = "client_stream"
    SERVER_STREAM = "server_stream"
    BIDI_STREAM = "bidi_stream"


def stream_kind_of(client_streaming: bool, server_streaming: bool) -> str:
    """The `StreamKind` of a method with the given streaming flags."""
    if client_streaming and server_streaming:
        return StreamKind.BIDI_STREAM
    if client_streaming:
        return StreamKind.CLIENT_STREAM
    if server_streaming:
        return StreamKind.SERVER_STREAM
    return StreamKind.UNARY


@dataclass(frozen=True)
class Method:
    """A single RPC method of a service."""

    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False

    @property
    def is_stream(self) -> bool:
        """Whether either side of the method streams."""
        return self.client_streaming or self.server_streaming

    @property
    def stream_kind(self) -> str:
        """The kind of the method, see `StreamKind`."""
        return stream_kind_of(self.client_streaming, self.server_streaming)


@dataclass(frozen=True)
class Service:
    """A service and its methods, in declaration order."""

    name: str
    methods: tuple[Method, ...] = ()


@dataclass(frozen=True)
class SchemaFile:
    """One schema file of a compilation unit.

    Attributes:
        path: The file path, unique within a compilation unit.
        package: The declared, dotted package name. Several files may share one.
        dependencies: Paths of the files this file imports.
        services: The services of this file, in declaration order.
        module_hint: The output-module option of the file, e.g. `github.com/x/common;common`, if any.
    """

    path: str
    package: str = ""
    dependencies: tuple[str, ...] = ()
    services: tuple[Service, ...] = ()
    module_hint: str | None = None
    _dependency_set: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Cache the dependency paths for membership tests."""
        object.__setattr__(self, "_dependency_set", frozenset(self.dependencies))

    def depends_on(self, path: str) -> bool:
        """Whether the file declares a dependency on the file at `path`."""
        return path in self._dependency_set

    @property
    def has_services(self) -> bool:
        """Whether the file declares at least one service."""
        return len(self.services) > 0


CompilationUnit = Sequence[SchemaFile]
