"""pull-alternates: mirror-aware alternate sources for failed image pulls."""

from pull_alternates.aggregator import MirrorEntry, MirrorIndex, PolicyAggregator
from pull_alternates.constants import __version__
from pull_alternates.context import ResolveContext
from pull_alternates.exceptions import (
    ConfigLoadError,
    InvalidReferenceError,
    LoadCancelledError,
    PolicyFormatError,
    PullAlternatesError,
)
from pull_alternates.policy import MirrorRule, PolicyDocument
from pull_alternates.reference import ImageReference
from pull_alternates.resolver import AlternateResolver, AlternateStrategy
from pull_alternates.sources import (
    DirectoryPolicyLister,
    FilePolicySource,
    ListerPolicySource,
    PolicyLister,
    StaticPolicyLister,
)

__all__ = [
    "AlternateResolver",
    "AlternateStrategy",
    "ConfigLoadError",
    "DirectoryPolicyLister",
    "FilePolicySource",
    "ImageReference",
    "InvalidReferenceError",
    "ListerPolicySource",
    "LoadCancelledError",
    "MirrorEntry",
    "MirrorIndex",
    "MirrorRule",
    "PolicyAggregator",
    "PolicyDocument",
    "PolicyFormatError",
    "PolicyLister",
    "PullAlternatesError",
    "ResolveContext",
    "StaticPolicyLister",
    "__version__",
]
