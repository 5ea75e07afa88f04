"""
Parsing and formatting of container image references.

This module provides the ImageReference dataclass used by the policy loader and
the resolver. Matching of mirror rules is done on the repository path only, so
the reference keeps registry, namespace and name separate from tag and digest.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional

from pull_alternates.constants import LOCALHOST
from pull_alternates.exceptions import InvalidReferenceError

_TAG_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")
_DIGEST_RE = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[A-Za-z0-9=_-]+$")
_COMPONENT_RE = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")


def _looks_like_registry(component: str) -> bool:
    """Check if the first path component is a registry host."""
    return "." in component or ":" in component or component == LOCALHOST


@dataclass(frozen=True)
class ImageReference:
    """
    Parsed container image reference.

    Formatting reproduces the path as written: no implicit docker.io or
    library/ defaults are added, so a parsed reference compares equal to one
    parsed from its own `exact` form.
    """

    registry: Optional[str]
    """Registry hostname (e.g., 'quay.io', 'localhost:5000'). None when not written."""

    namespace: Optional[str]
    """Namespace/organization (e.g., 'ocp-test'). None when not written."""

    name: str
    """Repository name; may contain further '/'-separated path segments."""

    tag: Optional[str] = None
    """Image tag (e.g., '4.5'). None if absent."""

    digest: Optional[str] = None
    """Content digest (e.g., 'sha256:abc...'). None if absent."""

    @classmethod
    def parse(cls, image: str) -> "ImageReference":
        """
        Parse a container image reference string.

        Handles:
            - release                              -> name only
            - ocp-test/release                     -> namespace/name
            - quay.io/release                      -> registry/name
            - quay.io/ocp-test/release:4.5         -> registry/namespace/name:tag
            - quay.io/ocp-test/sub/release@sha256:... -> nested name with digest

        Args:
            image: Image reference string

        Returns:
            Parsed ImageReference

        Raises:
            InvalidReferenceError: If the string is not a valid reference
        """
        if not isinstance(image, str) or not image:
            raise InvalidReferenceError(str(image), "empty reference")
        if any(ch.isspace() for ch in image):
            raise InvalidReferenceError(image, "contains whitespace")

        remainder = image
        tag = None
        digest = None

        if "@" in remainder:
            remainder, digest = remainder.rsplit("@", 1)
            if not _DIGEST_RE.match(digest):
                raise InvalidReferenceError(image, f"invalid digest {digest!r}")

        # A colon after the last slash separates the tag; earlier ones are ports
        last_colon = remainder.rfind(":")
        if last_colon > remainder.rfind("/"):
            remainder, tag = remainder[:last_colon], remainder[last_colon + 1:]
            if not _TAG_RE.match(tag):
                raise InvalidReferenceError(image, f"invalid tag {tag!r}")

        parts = remainder.split("/")
        if any(not part for part in parts):
            raise InvalidReferenceError(image, "empty path component")

        registry = None
        namespace = None
        if len(parts) == 1:
            name = parts[0]
        elif len(parts) == 2:
            if _looks_like_registry(parts[0]):
                registry, name = parts
            else:
                namespace, name = parts
        else:
            registry = parts[0]
            namespace = parts[1]
            name = "/".join(parts[2:])

        for component in ([namespace] if namespace else []) + name.split("/"):
            if not _COMPONENT_RE.match(component):
                raise InvalidReferenceError(
                    image, f"invalid repository component {component!r}"
                )

        return cls(
            registry=registry,
            namespace=namespace,
            name=name,
            tag=tag,
            digest=digest,
        )

    @property
    def repository_path(self) -> str:
        """Return registry/namespace/name without tag or digest."""
        parts = []
        if self.registry:
            parts.append(self.registry)
        if self.namespace:
            parts.append(self.namespace)
        parts.append(self.name)
        return "/".join(parts)

    @property
    def exact(self) -> str:
        """Return the full reference, preferring the digest over the tag."""
        result = self.repository_path
        if self.digest:
            return f"{result}@{self.digest}"
        if self.tag:
            return f"{result}:{self.tag}"
        return result

    def as_repository(self) -> "ImageReference":
        """
        Return a copy with tag and digest cleared.

        Returns:
            New ImageReference addressing the repository only
        """
        if self.tag is None and self.digest is None:
            return self
        return replace(self, tag=None, digest=None)

    def __str__(self) -> str:
        return self.exact


def repository_path(image: str) -> str:
    """
    Normalize an image string to its repository path.

    Args:
        image: Full image reference

    Returns:
        Repository path with tag and digest removed

    Examples:
        >>> repository_path("quay.io/ocp-test/release:4.5")
        'quay.io/ocp-test/release'
        >>> repository_path("localhost:5000/app@sha256:abc123")
        'localhost:5000/app'
    """
    return ImageReference.parse(image).repository_path
