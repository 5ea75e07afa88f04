"""
Mirror policy documents and their serialized form.

A policy document declares that content under a source repository is also
available, bit for bit, from one or more mirror repositories. Documents are
written in the ImageContentSourcePolicy shape (or the newer *MirrorSet kinds)
and read with PyYAML, so JSON documents load too.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from pull_alternates.constants import DEFAULT_POLICY_KIND, POLICY_KIND_RULE_KEYS
from pull_alternates.exceptions import (
    ConfigLoadError,
    InvalidReferenceError,
    PolicyFormatError,
)
from pull_alternates.reference import ImageReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorRule:
    """A source repository and the mirrors that host identical content."""

    source: str
    """Source repository path (e.g., 'quay.io/ocp-test/release')."""

    mirrors: tuple[str, ...] = ()
    """Mirror repository paths, in order of preference."""

    @classmethod
    def from_dict(cls, data: Any, where: str = "rule") -> "MirrorRule":
        """
        Build a rule from its serialized mapping.

        Args:
            data: Mapping with `source` and optional `mirrors` keys
            where: Location used in error messages

        Returns:
            Parsed MirrorRule

        Raises:
            PolicyFormatError: If the mapping does not describe a valid rule
        """
        if not isinstance(data, dict):
            raise PolicyFormatError(f"{where}: expected a mapping, got {type(data).__name__}")

        source = data.get("source")
        if not isinstance(source, str) or not source:
            raise PolicyFormatError(f"{where}: 'source' must be a non-empty string")

        mirrors = data.get("mirrors") or []
        if not isinstance(mirrors, list):
            raise PolicyFormatError(f"{where}: 'mirrors' must be a list")
        for mirror in mirrors:
            if not isinstance(mirror, str) or not mirror:
                raise PolicyFormatError(f"{where}: mirror entries must be non-empty strings")

        return cls(source=source, mirrors=tuple(mirrors))

    def source_reference(self) -> ImageReference:
        """Parse the source into a repository-only reference."""
        return _parse_repository(self.source, "source")

    def mirror_references(self) -> list[ImageReference]:
        """Parse the mirrors into repository-only references, order preserved."""
        return [_parse_repository(mirror, "mirror") for mirror in self.mirrors]


@dataclass(frozen=True)
class PolicyDocument:
    """
    An ordered collection of mirror rules.

    Documents enumerated from a collection carry a name; it is used for
    provenance and ordering only, never for matching.
    """

    name: Optional[str] = None
    rules: tuple[MirrorRule, ...] = field(default_factory=tuple)
    kind: str = DEFAULT_POLICY_KIND

    @classmethod
    def from_dict(cls, data: Any, name: Optional[str] = None) -> "PolicyDocument":
        """
        Build a document from its deserialized form.

        Args:
            data: Mapping loaded from YAML/JSON
            name: Name to use when the document declares none in `metadata.name`

        Returns:
            Parsed PolicyDocument

        Raises:
            PolicyFormatError: If the data is not a mirror policy
        """
        if not isinstance(data, dict):
            raise PolicyFormatError(
                f"Policy document must be a mapping, got {type(data).__name__}"
            )

        kind = data.get("kind") or DEFAULT_POLICY_KIND
        if not isinstance(kind, str):
            raise PolicyFormatError(f"'kind' must be a string, got {type(kind).__name__}")
        rules_key = POLICY_KIND_RULE_KEYS.get(kind)
        if rules_key is None:
            raise PolicyFormatError(f"Unsupported policy kind: {kind!r}")

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise PolicyFormatError("'metadata' must be a mapping")
        doc_name = metadata.get("name") or name
        if doc_name is not None and not isinstance(doc_name, str):
            raise PolicyFormatError(
                f"'metadata.name' must be a string, got {type(doc_name).__name__}"
            )

        spec = data.get("spec") or {}
        if not isinstance(spec, dict):
            raise PolicyFormatError("'spec' must be a mapping")

        raw_rules = spec.get(rules_key) or []
        if not isinstance(raw_rules, list):
            raise PolicyFormatError(f"'spec.{rules_key}' must be a list")

        rules = tuple(
            MirrorRule.from_dict(raw, where=f"spec.{rules_key}[{i}]")
            for i, raw in enumerate(raw_rules)
        )
        logger.debug(f"Parsed policy document {doc_name!r} with {len(rules)} rules")
        return cls(name=doc_name, rules=rules, kind=kind)

    @classmethod
    def from_file(cls, path: Path) -> "PolicyDocument":
        """
        Read and deserialize a single policy document.

        Args:
            path: Path to a YAML or JSON document

        Returns:
            Parsed PolicyDocument (unnamed unless it declares `metadata.name`)

        Raises:
            ConfigLoadError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with open(path, "rb") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigLoadError(f"Cannot read policy file: {e}", source=str(path)) from e
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise PolicyFormatError(f"Invalid YAML in policy file: {e}", source=str(path)) from e

        if data is None:
            raise PolicyFormatError("Policy file is empty", source=str(path))

        try:
            return cls.from_dict(data)
        except PolicyFormatError as e:
            e.source = e.source or str(path)
            raise

    def to_dict(self) -> dict:
        """Serialize back to the mapping shape accepted by `from_dict`."""
        data: dict[str, Any] = {"kind": self.kind}
        if self.name:
            data["metadata"] = {"name": self.name}
        data["spec"] = {
            POLICY_KIND_RULE_KEYS[self.kind]: [
                {"source": rule.source, "mirrors": list(rule.mirrors)}
                for rule in self.rules
            ]
        }
        return data


def _parse_repository(value: str, role: str) -> ImageReference:
    """Parse a policy path, raising PolicyFormatError on bad input."""
    try:
        return ImageReference.parse(value).as_repository()
    except InvalidReferenceError as e:
        raise PolicyFormatError(f"Invalid {role} in mirror rule: {e}") from e
