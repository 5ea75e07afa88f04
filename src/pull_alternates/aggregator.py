"""
Policy aggregation: load mirror policy once and merge it into one index.

The aggregator owns the only mutable state in the package: an optional
MirrorIndex guarded by a lock. The first successful load populates it and
every later call returns it without touching the policy source again.
Failed or cancelled loads leave nothing behind, so the next call retries.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from pull_alternates.context import ResolveContext
from pull_alternates.exceptions import ConfigLoadError
from pull_alternates.policy import PolicyDocument
from pull_alternates.reference import ImageReference
from pull_alternates.sources import (
    EmptyPolicySource,
    FilePolicySource,
    ListerPolicySource,
    PolicyLister,
    PolicySource,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorEntry:
    """One mirror recorded for a source repository."""

    origin: Optional[str]
    """Name of the policy document that contributed the mirror (None if unnamed)."""

    mirror: ImageReference
    """Mirror repository, without tag or digest."""


class MirrorIndex:
    """
    Read-only view of all mirror rules, keyed by source repository path.

    For each source, entries keep document order, then rule order within a
    document, then mirror order within a rule. Safe to share across threads.
    """

    def __init__(self, entries: Mapping[str, tuple[MirrorEntry, ...]], document_count: int = 0):
        self._entries = MappingProxyType(dict(entries))
        self.document_count = document_count

    @classmethod
    def build(cls, documents: Iterable[PolicyDocument]) -> "MirrorIndex":
        """
        Merge documents into an index.

        Args:
            documents: Documents in enumeration order

        Returns:
            New MirrorIndex

        Raises:
            PolicyFormatError: If a source or mirror is not a valid reference
        """
        merged: dict[str, list[MirrorEntry]] = {}
        count = 0
        for document in documents:
            count += 1
            for rule in document.rules:
                key = rule.source_reference().repository_path
                merged.setdefault(key, []).extend(
                    MirrorEntry(origin=document.name, mirror=mirror)
                    for mirror in rule.mirror_references()
                )
        return cls({key: tuple(value) for key, value in merged.items()}, document_count=count)

    def lookup(self, repository_path: str) -> tuple[MirrorEntry, ...]:
        """Return the mirrors recorded for a repository path (empty if none)."""
        return self._entries.get(repository_path, ())

    def sources(self) -> list[str]:
        """Return every source repository path with at least one rule."""
        return list(self._entries)

    def __contains__(self, repository_path: object) -> bool:
        return repository_path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MirrorIndex(sources={len(self)}, documents={self.document_count})"


class PolicyAggregator:
    """Loads mirror policy from its source at most once and caches the index."""

    def __init__(self, source: Optional[PolicySource] = None):
        """
        Initialize the aggregator.

        Args:
            source: Where documents come from (default: no policy)
        """
        self.source = source if source is not None else EmptyPolicySource()
        self._index: Optional[MirrorIndex] = None
        self._lock = threading.Lock()

    @classmethod
    def for_config(
        cls,
        policy_file: Optional[Union[Path, str]] = None,
        lister: Optional[PolicyLister] = None,
    ) -> "PolicyAggregator":
        """
        Pick the policy source from configuration.

        A policy file takes precedence; the lister is not consulted when one
        is given.
        """
        if policy_file:
            return cls(FilePolicySource(policy_file))
        if lister is not None:
            return cls(ListerPolicySource(lister))
        return cls(EmptyPolicySource())

    @property
    def loaded(self) -> bool:
        """Whether an index has been built."""
        return self._index is not None

    def load(self, ctx: Optional[ResolveContext] = None) -> MirrorIndex:
        """
        Return the merged index, loading it on first use.

        Args:
            ctx: Cancellation/deadline context for the load

        Returns:
            The cached MirrorIndex

        Raises:
            ConfigLoadError: If the load fails or is cancelled (nothing is cached)
        """
        index = self._index
        if index is not None:
            logger.debug("Using cached mirror index")
            return index

        ctx = ctx if ctx is not None else ResolveContext()
        with self._lock:
            # Another caller may have finished the load while we waited
            if self._index is not None:
                return self._index

            description = self.source.describe()
            try:
                ctx.check(source=description)
                documents = self.source.load(ctx)
                ctx.check(source=description)
                index = MirrorIndex.build(documents)
            except ConfigLoadError as e:
                if e.source is None:
                    e.source = description
                logger.warning(f"Failed to load mirror policy: {e}")
                raise

            self._index = index
            logger.info(
                f"Loaded {len(index)} mirror sources from "
                f"{index.document_count} policy documents ({description})"
            )
            return index
