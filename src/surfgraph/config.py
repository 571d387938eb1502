"""
Format configuration for surfgraph.

Provides:
- Namespace aliases used to shorten and resolve handles
- Serializer formatting switches
- YAML persistence and validation
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from surfgraph.errors import HandleError
from surfgraph.names import is_valid_name_token
from surfgraph.tags import check_absolute

logger = logging.getLogger(__name__)

LINE_SEPARATORS = ("\n", "\r\n", "\r")


class ConfigValidationError(ValueError):
    """Raised when a configuration fails validation."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass
class SurfConfig:
    """Settings shared by the SURF parser, serializer and CSV importer."""
    namespaces: Dict[str, str] = field(default_factory=dict)  # alias -> namespace IRI
    formatted: bool = False
    indent: str = "\t"
    line_separator: str = "\n"
    sequence_separator_required: bool = False

    @property
    def aliases_by_namespace(self) -> Dict[str, str]:
        return {namespace: alias for alias, namespace in self.namespaces.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespaces": dict(self.namespaces),
            "formatted": self.formatted,
            "indent": self.indent,
            "line_separator": self.line_separator,
            "sequence_separator_required": self.sequence_separator_required,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SurfConfig":
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                logger.warning(f"Ignoring unknown configuration key: {key}")
        return cls(
            namespaces=dict(data.get("namespaces") or {}),
            formatted=data.get("formatted", False),
            indent=data.get("indent", "\t"),
            line_separator=data.get("line_separator", "\n"),
            sequence_separator_required=data.get("sequence_separator_required", False),
        )

    def validate(self) -> "SurfConfig":
        """
        Check the configuration.

        Returns:
            The configuration itself

        Raises:
            ConfigValidationError: listing every problem found
        """
        errors = []
        for alias, namespace in self.namespaces.items():
            if not isinstance(alias, str) or not is_valid_name_token(alias):
                errors.append(f"Invalid namespace alias: {alias!r}")
            try:
                check_absolute(namespace)
            except HandleError as e:
                errors.append(str(e))
                continue
            if not namespace.endswith("/"):
                errors.append(f"Namespace {namespace!r} for alias {alias!r} must end with '/'")
        if not isinstance(self.indent, str) or (self.indent and not self.indent.isspace()):
            errors.append(f"Indent must be whitespace: {self.indent!r}")
        if self.line_separator not in LINE_SEPARATORS:
            errors.append(f"Unsupported line separator: {self.line_separator!r}")
        for name in ("formatted", "sequence_separator_required"):
            if not isinstance(getattr(self, name), bool):
                errors.append(f"{name} must be a boolean")
        if errors:
            raise ConfigValidationError(errors)
        return self

    def save(self, path: Union[str, Path]) -> None:
        """Save the configuration as YAML."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SurfConfig":
        """Load and validate a configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigValidationError([f"Configuration file {path} must contain a mapping"])
        logger.debug(f"Loaded configuration from {path}")
        return cls.from_dict(data).validate()
