"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Sequence
from dataclasses import dataclass

from triple_stub_generator.schema_types import (
    MODULE_HINT_SEPARATOR,
    MODULE_PATH_SEPARATOR,
    NESTED_NAME_SEPARATOR,
    RESERVED_WORDS,
    SchemaFile,
)

_INVALID_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_]")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def sanitize_name(name: str) -> str:
    """Sanitize a name to avoid reserved words.

    If the name is a reserved word, append an underscore.
    E.g. 'type' becomes 'type_', 'func' becomes 'func_'.

    Args:
        name (str): The original name.

    Returns:
        str: The sanitized name.
    """
    if name in RESERVED_WORDS:
        return f"{name}_"
    return name


def sanitize_identifier(name: str) -> str:
    """Turn an arbitrary string into an identifier-safe name.

    Characters outside of `[A-Za-z0-9_]` are replaced by underscores, a leading digit gets an
    underscore prefix, and reserved words get an underscore suffix.

    Examples:
        >>> sanitize_identifier("github.com")
        'github_com'
        >>> sanitize_identifier("3d")
        '_3d'
        >>> sanitize_identifier("type")
        'type_'

    Args:
        name (str): The raw candidate name.

    Returns:
        str: The sanitized name, or an empty string if nothing is left to sanitize.
    """
    sanitized = _INVALID_IDENTIFIER_CHARS.sub("_", name)
    if not sanitized:
        return ""

    if sanitized[0].isdigit():
        sanitized = f"_{sanitized}"

    return sanitize_name(sanitized)


def is_identifier(name: str) -> bool:
    """Whether a name is a valid, non-reserved identifier.

    Names made of underscores only are blank identifiers and do not count.
    """
    return _IDENTIFIER.fullmatch(name) is not None and name.strip("_") != "" and name not in RESERVED_WORDS


def exported_name(name: str) -> str:
    """Converts a name to its exported form, by upper-casing the first letter.

    E.g. `createReq` becomes `CreateReq`.
    """
    if not name:
        return name
    return name[0].upper() + name[1:]


def local_type_name(segments: Sequence[str]) -> str:
    """Build the name of a type within its output package from its dotted segments.

    Nested types are flattened, e.g. `Outer.Inner` becomes `Outer_Inner`.

    Args:
        segments (Sequence[str]): The type's segments below its package.

    Returns:
        str: The exported, flattened type name.
    """
    return exported_name(NESTED_NAME_SEPARATOR.join(segments))


def strip_extension(path: str) -> str:
    """Removes the file extension from a schema path.

    For example, `shop/common.proto` becomes `shop/common`.
    """
    return posixpath.splitext(path)[0]


def file_stem(path: str) -> str:
    """The base name of a schema path, up to its first dot.

    For example, `shop/orders.v2.proto` becomes `orders`.
    """
    return posixpath.basename(path).split(".")[0]


@dataclass(frozen=True)
class ModuleHint:
    """A parsed output-module hint.

    Attributes:
        import_path: The importable path of the output module.
        package_name: The explicit local package name, if the hint carries one.
    """

    import_path: str
    package_name: str | None = None


def parse_module_hint(hint: str | None) -> ModuleHint | None:
    """Parse an output-module hint of the form `import/path` or `import/path;name`.

    Args:
        hint (str | None): The raw hint, if any.

    Raises:
        ValueError: If the hint is structurally invalid.

    Returns:
        ModuleHint | None: The parsed hint, or None if no hint was given.
    """
    if not hint:
        return None

    parts = hint.split(MODULE_HINT_SEPARATOR)

    if len(parts) == 1:
        return ModuleHint(import_path=parts[0])

    if len(parts) != 2:
        raise ValueError(f"expected at most one '{MODULE_HINT_SEPARATOR}' in module hint '{hint}'")

    import_path, package_name = parts
    if not import_path:
        raise ValueError(f"module hint '{hint}' has an empty import path")

    if not package_name:
        raise ValueError(f"module hint '{hint}' has an empty package name")

    if not is_identifier(package_name):
        raise ValueError(f"package name '{package_name}' in module hint '{hint}' is not a valid identifier")

    return ModuleHint(import_path=import_path, package_name=package_name)


def package_name_from_import_path(import_path: str) -> str:
    """Derive a package name from the last element of an import path.

    For example, `github.com/x/my-shop` gives `my_shop`.
    """
    return sanitize_identifier(posixpath.basename(import_path.rstrip(MODULE_PATH_SEPARATOR)))


def module_path_for(schema_file: SchemaFile) -> str:
    """The module path under which the generated output of a schema file can be imported.

    The import-path portion of the file's module hint is preferred. Without a usable hint, the
    file path without its extension is used. Malformed hints are tolerated here, since only the
    file that is being generated has to carry a valid one.

    Args:
        schema_file (SchemaFile): The schema file.

    Returns:
        str: The module path.
    """
    if schema_file.module_hint:
        import_path = schema_file.module_hint.split(MODULE_HINT_SEPARATOR, 1)[0]
        if import_path:
            return import_path

    return strip_extension(schema_file.path)


def parse_parameters(parameter: str) -> dict[str, str]:
    """Split a plugin parameter string of the form `key=value,flag` into a mapping.

    Keys without a value map to an empty string.
    """
    result: dict[str, str] = {}
    for part in parameter.split(","):
        if not part.strip():
            continue
        if "=" in part:
            key, value = part.split("=", 1)
            result[key.strip()] = value.strip()
        else:
            result[part.strip()] = ""
    return result
