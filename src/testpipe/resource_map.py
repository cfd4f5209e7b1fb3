# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Resource name → checkout directory lookup.

Task files are referenced as `<resource>/<relative path>`; the resource map
says where each resource is checked out on disk.
"""

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional


class ResourceMap(Mapping):
    """Immutable mapping of resource name to directory.

    `with_alias` returns a new map instead of mutating, so an alias
    registered by one job never leaks into another.
    """

    def __init__(self, paths: Optional[Mapping[str, str]] = None):
        self._paths: Mapping[str, str] = MappingProxyType(dict(paths or {}))

    def __getitem__(self, name: str) -> str:
        return self._paths[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"ResourceMap({dict(self._paths)!r})"

    def with_alias(self, alias: str, resource: str) -> "ResourceMap":
        """Return a copy where `alias` points at `resource`'s directory.

        An unknown resource maps the alias to an empty path, which lookups
        treat as unresolved.
        """
        paths: Dict[str, str] = dict(self._paths)
        paths[alias] = self._paths.get(resource, "")
        return ResourceMap(paths)
