"""
Resource model and graph processor.

Producers (the SURF parser, the CSV importer) never build resources
themselves. They declare resources by tag and attach statements through a
processor, which keeps one resource per tag so that every mention of a tag,
in whatever order, resolves to the same object.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from surfgraph.errors import PropertyCardinalityError
from surfgraph.tags import (
    check_absolute,
    handle_from_tag,
    is_blank_tag,
    is_plural_tag,
    tag_from_handle,
)

logger = logging.getLogger(__name__)

_comparisons = threading.local()


@runtime_checkable
class ResourceDescription(Protocol):
    """Capability shared by anything that describes a resource with properties."""

    @property
    def tag(self) -> Optional[str]: ...

    @property
    def type_tag(self) -> Optional[str]: ...

    def property_tags(self) -> List[str]: ...

    def get_property_value(self, property_tag: str) -> Any: ...

    def set_property_value(self, property_tag: str, value: Any) -> Any: ...

    def add_property_value(self, property_tag: str, value: Any) -> None: ...


class Resource:
    """
    A node in a resource graph.

    Properties keep insertion order. A property whose tag name ends with `+`
    is plural and holds an ordered list of values; any other property holds
    exactly one value.
    """

    __slots__ = ("_tag", "_type_tag", "_properties")

    def __init__(self, tag: Optional[str] = None, type_tag: Optional[str] = None):
        if tag is not None:
            check_absolute(tag)
            if is_blank_tag(tag):
                tag = None
        if type_tag is not None:
            check_absolute(type_tag)
        self._tag = tag
        self._type_tag = type_tag
        self._properties: Dict[str, Any] = {}

    @property
    def tag(self) -> Optional[str]:
        return self._tag

    @property
    def type_tag(self) -> Optional[str]:
        return self._type_tag

    def type_handle(self, aliases_by_namespace: Optional[Mapping[str, str]] = None) -> Optional[str]:
        if self._type_tag is None:
            return None
        return handle_from_tag(self._type_tag, aliases_by_namespace)

    @property
    def property_count(self) -> int:
        return len(self._properties)

    def has_properties(self) -> bool:
        return bool(self._properties)

    def property_tags(self) -> List[str]:
        return list(self._properties)

    def properties(self) -> Iterator[Tuple[str, Any]]:
        """Iterate (property tag, value) pairs; plural properties yield their list."""
        return iter(list(self._properties.items()))

    def has_property(self, property_tag: str) -> bool:
        return property_tag in self._properties

    def get_property_value(self, property_tag: str) -> Any:
        """The value of a property, the list of values for a plural one, or None."""
        return self._properties.get(property_tag)

    def get_property_values(self, property_tag: str) -> List[Any]:
        """The values of a property as a list, regardless of cardinality."""
        if property_tag not in self._properties:
            return []
        value = self._properties[property_tag]
        return list(value) if is_plural_tag(property_tag) else [value]

    def set_property_value(self, property_tag: str, value: Any) -> Any:
        """
        Set a property, replacing any previous value.

        For a plural property the value becomes its single member.

        Returns:
            The previous value, or None
        """
        check_absolute(property_tag)
        old = self._properties.get(property_tag)
        self._properties[property_tag] = [value] if is_plural_tag(property_tag) else value
        return old

    def add_property_value(self, property_tag: str, value: Any) -> None:
        """
        Add a value to a property.

        Raises:
            PropertyCardinalityError: if the property is singular and already set
        """
        check_absolute(property_tag)
        if is_plural_tag(property_tag):
            self._properties.setdefault(property_tag, []).append(value)
        elif property_tag in self._properties:
            raise PropertyCardinalityError(
                f"Property {property_tag} is singular and already has a value."
            )
        else:
            self._properties[property_tag] = value

    def remove_property(self, property_tag: str) -> Any:
        return self._properties.pop(property_tag, None)

    # Handle-based access

    def find_property_value_by_handle(
        self, handle: str, namespaces_by_alias: Optional[Mapping[str, str]] = None
    ) -> Any:
        return self.get_property_value(tag_from_handle(handle, namespaces_by_alias))

    def set_property_value_by_handle(
        self, handle: str, value: Any, namespaces_by_alias: Optional[Mapping[str, str]] = None
    ) -> Any:
        return self.set_property_value(tag_from_handle(handle, namespaces_by_alias), value)

    def add_property_value_by_handle(
        self, handle: str, value: Any, namespaces_by_alias: Optional[Mapping[str, str]] = None
    ) -> None:
        self.add_property_value(tag_from_handle(handle, namespaces_by_alias), value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        if self is other:
            return True
        if self._tag != other._tag or self._type_tag != other._type_tag:
            return False
        # A pair already under comparison further up the stack is a cycle; treat it as equal.
        in_progress = getattr(_comparisons, "pairs", None)
        if in_progress is None:
            in_progress = _comparisons.pairs = set()
        pair = (id(self), id(other))
        if pair in in_progress:
            return True
        in_progress.add(pair)
        try:
            return self._properties == other._properties
        finally:
            in_progress.discard(pair)

    def __hash__(self) -> int:
        return hash(self._tag)

    def __repr__(self) -> str:
        label = self._tag or "*"
        type_handle = self.type_handle() or self._type_tag or ""
        return f"Resource({label} {type_handle} properties={len(self._properties)})"


# =============================================================================
# Graph processing
# =============================================================================

class UrfProcessor(Protocol):
    """Sink for the resource declarations and statements produced by a parser."""

    def declare_resource(self, tag: str, type_tag: Optional[str] = None) -> Resource: ...

    def reference_resource(self, tag: str) -> Resource: ...

    def process_statement(self, subject: Resource, property_tag: str, value: Any) -> None: ...

    def report_root(self, value: Any) -> None: ...

    def get_result(self) -> Any: ...


class SimpleGraphProcessor:
    """
    Builds an in-memory graph of Resource objects.

    Resources live in an arena keyed by tag. A reference to a tag that has not
    been declared yet creates a placeholder, which the later declaration fills
    in place; `unresolved_tags()` reports placeholders that never were.
    """

    def __init__(self):
        self._resources: Dict[str, Resource] = {}
        self._placeholders: Dict[str, Resource] = {}
        self._roots: List[Any] = []

    @property
    def resources(self) -> Mapping[str, Resource]:
        return dict(self._resources)

    def declare_resource(self, tag: str, type_tag: Optional[str] = None) -> Resource:
        """
        Register a resource for the tag, or return the one already registered.

        Raises:
            ValueError: if the resource was declared with a different type
        """
        resource = self._resources.get(tag)
        if resource is None:
            resource = Resource(tag, type_tag)
            self._resources[tag] = resource
            logger.debug(f"Declared resource {tag}")
        else:
            self._placeholders.pop(tag, None)
            if type_tag is not None:
                if resource.type_tag is None:
                    resource._type_tag = type_tag
                elif resource.type_tag != type_tag:
                    raise ValueError(
                        f"Resource {tag} already has type {resource.type_tag}, not {type_tag}."
                    )
        return resource

    def reference_resource(self, tag: str) -> Resource:
        """Return the resource for the tag, creating a placeholder if it is unknown."""
        resource = self._resources.get(tag)
        if resource is None:
            resource = Resource(tag)
            self._resources[tag] = resource
            self._placeholders[tag] = resource
            logger.debug(f"Created placeholder for {tag}")
        return resource

    def process_statement(self, subject: Resource, property_tag: str, value: Any) -> None:
        subject.add_property_value(property_tag, value)

    def report_root(self, value: Any) -> None:
        self._roots.append(value)

    def unresolved_tags(self) -> List[str]:
        return list(self._placeholders)

    def get_result(self) -> List[Any]:
        """The reported roots, in the order they were reported."""
        return list(self._roots)
