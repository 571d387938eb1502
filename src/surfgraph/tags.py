"""
Tag/Handle Codec.

A tag is an absolute IRI identifying a resource. A handle is its compact,
human-friendly form:

    [alias/]segment[-segment...][+][#id]

Handles without an alias resolve against the ad-hoc namespace
`https://urf.name/`, where each hyphen-separated segment becomes a path
segment (`foo-bar` is `https://urf.name/foo/bar`). Handles with an alias
resolve against a registered namespace and may only carry one segment and
no ID. The trailing `+` marks a plural property.

All functions here are pure and raise HandleError for invalid arguments.
Conversions that merely cannot shorten a tag return None.
"""

import uuid
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from urllib.parse import SplitResult, unquote, urljoin, urlsplit, urlunsplit

from surfgraph.errors import HandleError
from surfgraph.names import (
    ID_DELIMITER,
    NAMESPACE_ALIAS_DELIMITER,
    PLURAL_MARKER,
    SEGMENT_DELIMITER,
    is_valid_id_token,
    is_valid_name,
    is_valid_name_token,
    split_name,
)

AD_HOC_NAMESPACE = "https://urf.name/"
URF_NAMESPACE = f"{AD_HOC_NAMESPACE}urf/"

PATH_SEPARATOR = "/"

# ASCII characters that may appear unencoded in a path segment or fragment
_IRI_SAFE_ASCII = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    "-._~!$&'()*+,;=:@"
)


def _tag(name: str) -> str:
    return f"{URF_NAMESPACE}{name}"


# Well-known type tags for literal kinds
BINARY_TYPE_TAG = _tag("Binary")
BOOLEAN_TYPE_TAG = _tag("Boolean")
CHARACTER_TYPE_TAG = _tag("Character")
DECIMAL_TYPE_TAG = _tag("Decimal")
EMAIL_ADDRESS_TYPE_TAG = _tag("EmailAddress")
INSTANT_TYPE_TAG = _tag("Instant")
INTEGER_TYPE_TAG = _tag("Integer")
IRI_TYPE_TAG = _tag("Iri")
LIST_TYPE_TAG = _tag("List")
LOCAL_DATE_TYPE_TAG = _tag("LocalDate")
LOCAL_DATE_TIME_TYPE_TAG = _tag("LocalDateTime")
LOCAL_TIME_TYPE_TAG = _tag("LocalTime")
MAP_TYPE_TAG = _tag("Map")
MAP_ENTRY_TYPE_TAG = _tag("MapEntry")
MONTH_DAY_TYPE_TAG = _tag("MonthDay")
OFFSET_DATE_TIME_TYPE_TAG = _tag("OffsetDateTime")
OFFSET_TIME_TYPE_TAG = _tag("OffsetTime")
REAL_TYPE_TAG = _tag("Real")
REGULAR_EXPRESSION_TYPE_TAG = _tag("RegularExpression")
SET_TYPE_TAG = _tag("Set")
STRING_TYPE_TAG = _tag("String")
TELEPHONE_NUMBER_TYPE_TAG = _tag("TelephoneNumber")
UUID_TYPE_TAG = _tag("Uuid")
YEAR_TYPE_TAG = _tag("Year")
YEAR_MONTH_TYPE_TAG = _tag("YearMonth")
ZONED_DATE_TIME_TYPE_TAG = _tag("ZonedDateTime")

# Well-known property tags
TYPE_PROPERTY_TAG = _tag("type")
KEY_PROPERTY_TAG = _tag("key")
VALUE_PROPERTY_TAG = _tag("value")
MEMBER_PROPERTY_TAG = _tag("member")


@dataclass(frozen=True)
class HandleParts:
    """The syntactic pieces of a handle."""
    alias: Optional[str]
    segments: List[str]
    plural: bool = False
    id: Optional[str] = None


def encode_component(text: str) -> str:
    """Percent-encode the characters not allowed in an IRI segment or fragment."""
    encoded = []
    for ch in text:
        if ord(ch) >= 0x80 or ch in _IRI_SAFE_ASCII:
            encoded.append(ch)
        else:
            encoded.extend(f"%{b:02X}" for b in ch.encode("utf-8"))
    return "".join(encoded)


def check_absolute(tag: str) -> SplitResult:
    """
    Verify that a tag is an absolute IRI.

    Returns:
        The split form of the tag

    Raises:
        HandleError: if the tag has no scheme or contains whitespace
    """
    if not isinstance(tag, str):
        raise HandleError(f"Tag must be a string, not {type(tag).__name__}.")
    try:
        parts = urlsplit(tag)
    except ValueError as e:
        raise HandleError(f"Invalid tag {tag!r}: {e}") from e
    if not parts.scheme or any(ch.isspace() for ch in tag):
        raise HandleError(f"Tag {tag!r} is not an absolute IRI.")
    return parts


def tag_namespace(tag: str) -> Optional[str]:
    """
    The parent collection IRI of the tag's path.

    A tag without a path, or with only the root path, has no namespace.
    """
    parts = check_absolute(tag)
    path = parts.path
    if not path or path == PATH_SEPARATOR:
        return None
    parent_end = path.rstrip(PATH_SEPARATOR).rfind(PATH_SEPARATOR)
    if parent_end < 0:
        return None
    return urlunsplit((parts.scheme, parts.netloc, path[:parent_end + 1], "", ""))


def _last_segment(path: str) -> Optional[str]:
    if not path or path.endswith(PATH_SEPARATOR):
        return None
    return path[path.rfind(PATH_SEPARATOR) + 1:]


def tag_name(tag: str) -> Optional[str]:
    """
    The decoded last non-collection path segment plus `#id` if a fragment is present.

    Returns None when there is no such segment or the result is not a valid name.
    """
    parts = check_absolute(tag)
    segment = _last_segment(parts.path)
    if segment is None:
        return None
    name = unquote(segment)
    if "#" in tag:
        name = f"{name}{ID_DELIMITER}{unquote(parts.fragment)}"
    return name if is_valid_name(name) else None


def is_id_tag(tag: str) -> bool:
    parts = check_absolute(tag)
    return _last_segment(parts.path) is not None and bool(parts.fragment)


def type_tag_of(id_tag: str) -> Optional[str]:
    """The tag with its fragment removed, if the tag is an ID tag."""
    if not is_id_tag(id_tag):
        return None
    return id_tag[:id_tag.index("#")]


def id_of(id_tag: str) -> Optional[str]:
    """The decoded fragment of an ID tag."""
    if not is_id_tag(id_tag):
        return None
    return unquote(urlsplit(id_tag).fragment)


def is_plural_tag(tag: str) -> bool:
    """Whether the tag names a plural property (its name token ends with `+`)."""
    name = tag_name(tag)
    if name is None:
        return False
    token, _ = split_name(name)
    return token.endswith(PLURAL_MARKER)


def tag_for_type(namespace: str, name: str) -> str:
    """Construct a type tag from a namespace collection IRI and a name token."""
    parts = check_absolute(namespace)
    if not parts.path.endswith(PATH_SEPARATOR) or parts.query or "#" in namespace:
        raise HandleError(f"Namespace {namespace!r} is not a collection.")
    return namespace + encode_component(name)


def tag_for_instance(type_tag: str, id: str) -> str:
    """Construct an ID tag identifying the instance `id` of the given type."""
    parts = check_absolute(type_tag)
    if "#" in type_tag:
        raise HandleError(f"Type tag {type_tag!r} must not have a fragment.")
    if _last_segment(parts.path) is None:
        raise HandleError(f"Type tag {type_tag!r} has no name segment.")
    if not id:
        raise HandleError("Instance ID must not be empty.")
    return f"{type_tag}{ID_DELIMITER}{encode_component(id)}"


def generate_blank_tag(id: Optional[str] = None) -> str:
    """A tag for an anonymous resource, using the given ID or a random one."""
    if id is None:
        id = str(uuid.uuid4())
    elif not id:
        raise HandleError("Blank tag ID must not be empty.")
    return f"{AD_HOC_NAMESPACE}{ID_DELIMITER}{encode_component(id)}"


def is_blank_tag(tag: str) -> bool:
    """Whether the tag is in the ad-hoc namespace with the root path and a fragment."""
    if not tag.startswith(AD_HOC_NAMESPACE):
        return False
    parts = check_absolute(tag)
    return parts.path == PATH_SEPARATOR and not parts.query and bool(parts.fragment)


def blank_id_of(tag: str) -> Optional[str]:
    if not is_blank_tag(tag):
        return None
    return unquote(urlsplit(tag).fragment)


# =============================================================================
# Handles
# =============================================================================

def parse_handle(handle: str) -> HandleParts:
    """
    Split a handle into alias, segments, plural marker and ID.

    Raises:
        HandleError: if the text does not match the handle grammar
    """
    if not isinstance(handle, str) or not handle:
        raise HandleError(f"Invalid handle {handle!r}.")
    alias = None
    body = handle
    if NAMESPACE_ALIAS_DELIMITER in body:
        alias, _, body = body.partition(NAMESPACE_ALIAS_DELIMITER)
        if not is_valid_name_token(alias):
            raise HandleError(f"Invalid namespace alias in handle {handle!r}.")
    body, delimiter, id = body.partition(ID_DELIMITER)
    if delimiter and not is_valid_id_token(id):
        raise HandleError(f"Invalid ID in handle {handle!r}.")
    plural = body.endswith(PLURAL_MARKER)
    if plural:
        body = body[:-1]
    segments = body.split(SEGMENT_DELIMITER)
    if not all(is_valid_name_token(segment) for segment in segments):
        raise HandleError(f"Invalid handle {handle!r}.")
    return HandleParts(alias=alias, segments=segments, plural=plural, id=id if delimiter else None)


def is_valid_handle(handle: str) -> bool:
    try:
        parse_handle(handle)
    except HandleError:
        return False
    return True


def tag_from_handle(handle: str, namespaces_by_alias: Optional[Mapping[str, str]] = None) -> str:
    """
    Resolve a handle to its tag.

    Args:
        handle: The handle, e.g. `foo-bar`, `Example#123` or `ex/thing`
        namespaces_by_alias: Registered namespace IRIs keyed by alias

    Raises:
        HandleError: if the handle is invalid, its alias is unregistered, or an
            aliased handle carries multiple segments or an ID
    """
    parts = parse_handle(handle)
    namespace = AD_HOC_NAMESPACE
    if parts.alias is not None:
        namespace = (namespaces_by_alias or {}).get(parts.alias)
        if namespace is None:
            raise HandleError(f"Unregistered namespace alias {parts.alias!r} in handle {handle!r}.")
        if len(parts.segments) > 1:
            raise HandleError(f"Handles with multiple segments are only allowed in the ad-hoc namespace: {handle!r}.")
        if parts.id is not None:
            raise HandleError(f"Handles with an ID are only allowed in the ad-hoc namespace: {handle!r}.")
    path = PATH_SEPARATOR.join(parts.segments)
    if parts.plural:
        path += PLURAL_MARKER
    if parts.id is not None:
        path += ID_DELIMITER + parts.id
    return urljoin(namespace, path)


def handle_from_tag(tag: str, aliases_by_namespace: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Shorten a tag to a handle.

    Args:
        tag: The absolute tag
        aliases_by_namespace: Registered aliases keyed by namespace IRI

    Returns:
        The handle, or None if the tag cannot be expressed as one

    Raises:
        HandleError: if the tag is not absolute
    """
    aliases_by_namespace = aliases_by_namespace or {}
    parts = check_absolute(tag)
    if parts.query:
        return None
    name = tag_name(tag)
    namespace = tag_namespace(tag)
    if name is None or namespace is None:
        return None
    namespaces_by_alias: Dict[str, str] = {}
    if namespace.startswith(AD_HOC_NAMESPACE):
        relative = namespace[len(AD_HOC_NAMESPACE):]
        segments = [unquote(segment) for segment in relative.split(PATH_SEPARATOR)[:-1]]
        if not all(is_valid_name_token(segment) for segment in segments):
            return None
        handle = SEGMENT_DELIMITER.join(segments + [name])
    else:
        alias = aliases_by_namespace.get(namespace)
        if alias is None or split_name(name)[1] is not None:
            return None
        handle = f"{alias}{NAMESPACE_ALIAS_DELIMITER}{name}"
        namespaces_by_alias[alias] = namespace
    if not is_valid_handle(handle):
        return None
    if tag_from_handle(handle, namespaces_by_alias) != tag:
        return None
    return handle
