"""
Centralized configuration constants for pull-alternates.

Single source of truth for schema identifiers and defaults shared by the
policy loader, the aggregator and the settings layer.
"""

__version__ = "0.3.0"

# ============================================================================
# Policy Document Schema
# ============================================================================

POLICY_KIND_RULE_KEYS = {
    "ImageContentSourcePolicy": "repositoryDigestMirrors",
    "ImageDigestMirrorSet": "imageDigestMirrors",
    "ImageTagMirrorSet": "imageTagMirrors",
}
"""Recognised mirror policy kinds mapped to the `spec` field holding their rule list."""

DEFAULT_POLICY_KIND = "ImageContentSourcePolicy"
"""Kind assumed when a document omits `kind`."""

POLICY_FILE_SUFFIXES = (".yaml", ".yml", ".json")
"""File extensions picked up by the directory lister."""

# ============================================================================
# Image Reference Parsing
# ============================================================================

LOCALHOST = "localhost"
"""Registry name treated as a host even without a dot or port."""

# ============================================================================
# Timeouts (in seconds)
# ============================================================================

DEFAULT_LOAD_TIMEOUT = 30.0
"""Default deadline for the one-time policy load (30 seconds)."""

# ============================================================================
# Environment
# ============================================================================

ENV_PREFIX = "PULL_ALTERNATES_"
"""Prefix for settings read from environment variables."""
