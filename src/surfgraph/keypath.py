"""
Key-path lookup over a parsed resource graph.

Lets configuration loaders treat a graph as nested key/value settings:

    config = ResourceConfiguration(parse_surf(text))
    config.get_int("server.port")
    config.section("server").section_type

Each dot-separated segment of a key is a property handle when the current value
is a resource, or a key when it is a map.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import unquote, urlsplit

from surfgraph.errors import HandleError
from surfgraph.graph import Resource
from surfgraph.model import Iri

logger = logging.getLogger(__name__)

KEY_SEGMENT_DELIMITER = "."


class ResourceConfiguration:
    """A key-path view of a resource or map."""

    def __init__(self, root: Any, namespaces: Optional[Mapping[str, str]] = None):
        if root is None:
            raise ValueError("Configuration root must not be None.")
        self.root = root
        self.namespaces = dict(namespaces or {})

    @property
    def section_type(self) -> Optional[str]:
        """The type handle of the root resource, or its type tag if it has no handle."""
        if not isinstance(self.root, Resource) or self.root.type_tag is None:
            return None
        aliases_by_namespace = {namespace: alias for alias, namespace in self.namespaces.items()}
        return self.root.type_handle(aliases_by_namespace) or self.root.type_tag

    def find(self, key: str) -> Any:
        """
        Look up the value at a dotted key path.

        Args:
            key: Segments separated by `.`, e.g. `server.port`

        Returns:
            The value, or None if any segment is missing or is not a valid handle

        Raises:
            ValueError: if the key has an empty segment
        """
        value = self.root
        for segment in key.split(KEY_SEGMENT_DELIMITER):
            if not segment:
                raise ValueError(f"Configuration key {key!r} cannot have an empty segment.")
            if value is None:
                continue
            if isinstance(value, Resource):
                try:
                    value = value.find_property_value_by_handle(segment, self.namespaces)
                except HandleError:
                    logger.debug(f"Configuration key segment {segment!r} is not a handle")
                    value = None
            elif isinstance(value, Mapping):
                value = value.get(segment)
            else:
                value = None
        return value

    def get(self, key: str, default: Any = None) -> Any:
        value = self.find(key)
        return default if value is None else value

    def __contains__(self, key: str) -> bool:
        return self.find(key) is not None

    def _typed(self, key: str, expected: type, default: Any) -> Any:
        value = self.find(key)
        if value is None:
            return default
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise TypeError(
                f"Configuration value {key!r} is {type(value).__name__}, not {expected.__name__}."
            )
        return value

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._typed(key, str, default)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._typed(key, int, default)

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._typed(key, bool, default)

    def get_path(self, key: str, default: Optional[Path] = None) -> Optional[Path]:
        """
        Look up a path, given either as a string or as a `file:` IRI.

        Raises:
            TypeError: if the value is neither
        """
        value = self.find(key)
        if value is None:
            return default
        if isinstance(value, str):
            return Path(value)
        if isinstance(value, Iri):
            parts = urlsplit(value.value)
            if parts.scheme == "file":
                return Path(unquote(parts.path))
        raise TypeError(f"Configuration value {key!r} is not a path.")

    def section(self, key: str) -> Optional["ResourceConfiguration"]:
        """A nested scope for a resource or map value, or None if there is none."""
        value = self.find(key)
        if isinstance(value, (Resource, Mapping)):
            return ResourceConfiguration(value, self.namespaces)
        if value is not None:
            logger.debug(f"Configuration value {key!r} is not a section")
        return None

    def __repr__(self) -> str:
        return f"ResourceConfiguration({self.root!r})"
