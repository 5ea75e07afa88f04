"""
Alternate image sources for failed pulls.

Implements the Strategy pattern for deciding which references to try after a
pull fails. AlternateResolver looks the failing repository up in the mirror
policy and returns the original repository followed by every configured mirror.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from pull_alternates.aggregator import PolicyAggregator
from pull_alternates.context import ResolveContext
from pull_alternates.exceptions import ConfigLoadError
from pull_alternates.reference import ImageReference
from pull_alternates.sources import PolicyLister

logger = logging.getLogger(__name__)

ReferenceLike = Union[ImageReference, str]


def _as_reference(reference: ReferenceLike) -> ImageReference:
    if isinstance(reference, ImageReference):
        return reference
    return ImageReference.parse(reference)


class AlternateStrategy(ABC):
    """
    Abstract base class for alternate-source strategies.

    Each strategy defines how a failed reference expands into the ordered list
    of references to retry. The original repository always comes first.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name for logging."""
        ...

    @abstractmethod
    def on_failure(
        self, ctx: Optional[ResolveContext], reference: ReferenceLike
    ) -> list[ImageReference]:
        """
        Get the references to try after `reference` failed to pull.

        Args:
            ctx: Cancellation/deadline context (None for no limit)
            reference: The reference that failed

        Returns:
            Ordered references, original repository first

        Raises:
            ConfigLoadError: If the policy could not be loaded
        """
        ...

    def alternates_or_original(
        self, ctx: Optional[ResolveContext], reference: ReferenceLike
    ) -> list[ImageReference]:
        """
        Like `on_failure`, but fall back to the original when policy is unavailable.

        A broken policy should never make pulls less reliable than having no
        policy, so load errors are logged and the original repository is
        returned on its own.
        """
        ref = _as_reference(reference)
        try:
            return self.on_failure(ctx, ref)
        except ConfigLoadError as e:
            logger.warning(
                f"[{self.name}] Mirror policy unavailable, retrying {ref.repository_path} only: {e}"
            )
            return [ref.as_repository()]


class AlternateResolver(AlternateStrategy):
    """
    Strategy that looks up exact repository-path matches in the mirror policy.

    The policy is loaded through a PolicyAggregator on the first failure and
    reused for every later one.

    Example:
        resolver = AlternateResolver.from_file("icsp.yaml")
        for ref in resolver.on_failure(None, "quay.io/ocp-test/release:4.5"):
            ...
    """

    def __init__(self, aggregator: Optional[PolicyAggregator] = None):
        self.aggregator = aggregator if aggregator is not None else PolicyAggregator()

    @classmethod
    def from_file(cls, path: Union[Path, str]) -> "AlternateResolver":
        """Resolve against a single policy document on disk."""
        return cls(PolicyAggregator.for_config(policy_file=path))

    @classmethod
    def from_lister(cls, lister: PolicyLister) -> "AlternateResolver":
        """Resolve against every document the lister enumerates."""
        return cls(PolicyAggregator.for_config(lister=lister))

    @property
    def name(self) -> str:
        return "simple-lookup"

    def on_failure(
        self, ctx: Optional[ResolveContext], reference: ReferenceLike
    ) -> list[ImageReference]:
        ref = _as_reference(reference)
        index = self.aggregator.load(ctx)

        original = ref.as_repository()
        entries = index.lookup(original.repository_path)
        if not entries:
            logger.debug(f"No mirrors configured for {original.repository_path}")
            return [original]

        alternates = [original]
        alternates.extend(entry.mirror for entry in entries)
        logger.debug(
            f"Resolved {len(entries)} mirrors for {original.repository_path}: "
            f"{', '.join(entry.mirror.repository_path for entry in entries)}"
        )
        return alternates
