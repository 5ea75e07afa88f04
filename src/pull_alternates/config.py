"""Settings loaded from environment variables."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

from pull_alternates.aggregator import PolicyAggregator
from pull_alternates.constants import DEFAULT_LOAD_TIMEOUT, ENV_PREFIX
from pull_alternates.context import ResolveContext
from pull_alternates.resolver import AlternateResolver
from pull_alternates.sources import DirectoryPolicyLister


class Settings(BaseSettings):
    """pull-alternates settings.

    All values can be overridden via environment variables with the
    PULL_ALTERNATES_ prefix. Example: PULL_ALTERNATES_POLICY_FILE=/etc/icsp.yaml
    """

    policy_file: Optional[Path] = None  # single document, wins over policy_dir
    policy_dir: Optional[Path] = None  # one document per file, merged by name
    load_timeout_seconds: float = DEFAULT_LOAD_TIMEOUT

    model_config = {"env_prefix": ENV_PREFIX}

    def new_context(self) -> ResolveContext:
        """Context whose deadline is `load_timeout_seconds` from now."""
        return ResolveContext.with_timeout(self.load_timeout_seconds)


def build_resolver(settings: Optional[Settings] = None) -> AlternateResolver:
    """
    Build a resolver from settings.

    Args:
        settings: Settings to use (default: read from the environment)

    Returns:
        AlternateResolver in file mode, directory mode, or with no policy
    """
    settings = settings if settings is not None else Settings()
    lister = DirectoryPolicyLister(settings.policy_dir) if settings.policy_dir else None
    return AlternateResolver(
        PolicyAggregator.for_config(policy_file=settings.policy_file, lister=lister)
    )
