"""Assignment of short, unique import aliases to module paths."""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import override

from triple_stub_generator import helper
from triple_stub_generator.schema_types import MODULE_PATH_SEPARATOR, NESTED_NAME_SEPARATOR

logger = logging.getLogger(__name__)

MAX_SUFFIX_ATTEMPTS = 10
MAX_ALIAS_LENGTH = 32
HASH_WIDTH = 8
HASH_PREFIX = "m_"

LOW_INFORMATION_SEGMENTS = frozenset({"api", "pkg", "internal", "external"})
_VERSION_SEGMENT = re.compile(r"v\d+(?:(?:alpha|beta)\d*)?")


def is_low_information_segment(segment: str) -> bool:
    """Whether a path segment says little about the module, e.g. `api` or `v1`."""
    lowered = segment.lower()
    return lowered in LOW_INFORMATION_SEGMENTS or _VERSION_SEGMENT.fullmatch(lowered) is not None


def candidate_aliases(module_path: str) -> list[str]:
    """List the sanitized alias candidates for a module path, in order of preference.

    1. The last path segment.
    2. The last two path segments.
    3. All path segments, except for low-information ones.
    4. The whole path, flattened and truncated to `MAX_ALIAS_LENGTH`.

    Duplicates, and candidates that are empty or blank (underscores only), are dropped.

    Examples:
        >>> candidate_aliases("github.com/x/api/v1")
        ['v1', 'api_v1', 'github_com_x', 'github_com_x_api_v1']

    Args:
        module_path (str): The module path to find aliases for.

    Returns:
        list[str]: The candidates.
    """
    segments = [segment for segment in module_path.split(MODULE_PATH_SEPARATOR) if segment]

    raw_candidates: list[str] = []
    if segments:
        raw_candidates.append(segments[-1])

    if len(segments) >= 2:
        raw_candidates.append(NESTED_NAME_SEPARATOR.join(segments[-2:]))

    informative = [segment for segment in segments if not is_low_information_segment(segment)]
    if informative:
        raw_candidates.append(NESTED_NAME_SEPARATOR.join(informative))

    candidates: list[str] = []
    for raw_candidate in raw_candidates:
        candidate = helper.sanitize_identifier(raw_candidate)
        if helper.is_identifier(candidate) and candidate not in candidates:
            candidates.append(candidate)

    flattened = helper.sanitize_identifier(module_path)[:MAX_ALIAS_LENGTH]
    if helper.is_identifier(flattened) and flattened not in candidates:
        candidates.append(flattened)

    return candidates


def hashed_alias(module_path: str) -> str:
    """A fixed-width alias derived from the content of a module path."""
    digest = hashlib.sha1(module_path.encode("utf-8")).hexdigest()
    return f"{HASH_PREFIX}{digest[:HASH_WIDTH]}"


def _with_suffixes(candidate: str) -> Iterator[str]:
    yield candidate
    for attempt in range(1, MAX_SUFFIX_ATTEMPTS + 1):
        yield f"{candidate}_{attempt}"


class AliasTable:
    """The aliases of the imported modules of one generated file.

    Once a module path received an alias, the alias is never changed or handed out again.
    """

    def __init__(self, reserved: Iterable[str] = ()):
        """Initialize an empty alias table.

        Args:
            reserved (Iterable[str], optional): Names that may never be used as an alias,
                e.g. names that the generated file imports on its own. Defaults to ().
        """
        self._aliases: dict[str, str] = {}
        self._claimed: set[str] = set(reserved)

    def alias_for(self, module_path: str) -> str:
        """Get the alias of a module path, assigning a new one on first use.

        Args:
            module_path (str): The module path.

        Returns:
            str: The alias.
        """
        alias = self._aliases.get(module_path)
        if alias is not None:
            return alias

        alias = self._choose(module_path)
        self._aliases[module_path] = alias
        self._claimed.add(alias)

        logger.debug("Assigned alias '%s' to '%s'.", alias, module_path)
        return alias

    def get(self, module_path: str) -> str | None:
        """The alias of a module path, if one was assigned."""
        return self._aliases.get(module_path)

    def is_claimed(self, name: str) -> bool:
        """Whether a name is taken by an alias or reserved."""
        return name in self._claimed

    @property
    def aliases(self) -> Mapping[str, str]:
        """A read-only view of all assignments, module path to alias, in assignment order."""
        return MappingProxyType(self._aliases)

    def _choose(self, module_path: str) -> str:
        for candidate in candidate_aliases(module_path):
            for attempt in _with_suffixes(candidate):
                if attempt not in self._claimed:
                    return attempt

        fallback = hashed_alias(module_path)
        if fallback not in self._claimed:
            return fallback

        suffix = 1
        while f"{fallback}_{suffix}" in self._claimed:
            suffix += 1
        return f"{fallback}_{suffix}"

    def __contains__(self, module_path: object) -> bool:
        return module_path in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    @override
    def __repr__(self) -> str:
        return f"AliasTable(aliases={len(self._aliases)}, claimed={len(self._claimed)})"
