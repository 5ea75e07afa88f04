"""Where mirror policy documents come from.

A PolicySource is chosen once, when the aggregator is built, and exposes a
single `load(ctx)` regardless of origin:

  FilePolicySource     one serialized document on disk
  ListerPolicySource   every document a PolicyLister enumerates
  EmptyPolicySource    no configuration at all

Listers must return documents in a stable order. The aggregator merges rules
in exactly the order it receives documents, so that order decides which
mirrors are tried first. Both listers shipped here sort by document name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

from pull_alternates.constants import POLICY_FILE_SUFFIXES
from pull_alternates.context import ResolveContext
from pull_alternates.exceptions import ConfigLoadError
from pull_alternates.policy import PolicyDocument

logger = logging.getLogger(__name__)


@runtime_checkable
class PolicyLister(Protocol):
    """Enumerates every mirror policy document of the relevant kind."""

    def list(self, ctx: ResolveContext) -> Optional[Sequence[PolicyDocument]]:
        """Return all documents, ordered by a stable key (normally the name).

        Returning None or an empty sequence means there is no policy.
        """
        ...


@runtime_checkable
class PolicySource(Protocol):
    """Strategy that produces the documents for one aggregator load."""

    def load(self, ctx: ResolveContext) -> list[PolicyDocument]:
        ...

    def describe(self) -> str:
        ...


class FilePolicySource:
    """Single policy document read from a file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self, ctx: ResolveContext) -> list[PolicyDocument]:
        return [PolicyDocument.from_file(self.path)]

    def describe(self) -> str:
        return f"file {self.path}"


class ListerPolicySource:
    """Documents enumerated through a PolicyLister."""

    def __init__(self, lister: PolicyLister) -> None:
        self.lister = lister

    def load(self, ctx: ResolveContext) -> list[PolicyDocument]:
        try:
            documents = self.lister.list(ctx)
        except ConfigLoadError:
            raise
        except Exception as e:
            raise ConfigLoadError(
                f"Failed to list policy documents: {e}", source=self.describe()
            ) from e
        return list(documents or [])

    def describe(self) -> str:
        return f"lister {type(self.lister).__name__}"


class EmptyPolicySource:
    """No policy configured."""

    def load(self, ctx: ResolveContext) -> list[PolicyDocument]:
        return []

    def describe(self) -> str:
        return "no policy"


def _sort_key(document: PolicyDocument) -> str:
    return document.name or ""


class StaticPolicyLister:
    """In-memory documents, returned sorted by name unless told otherwise."""

    def __init__(self, documents: Sequence[PolicyDocument], sort: bool = True) -> None:
        documents = list(documents)
        self.documents = sorted(documents, key=_sort_key) if sort else documents

    def list(self, ctx: ResolveContext) -> list[PolicyDocument]:
        return list(self.documents)


class DirectoryPolicyLister:
    """
    Every policy document stored as a file in one directory.

    Files ending in .yaml, .yml or .json are parsed; documents without
    `metadata.name` are named after the file stem. Results are sorted by name.
    A missing directory means no policy.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def list(self, ctx: ResolveContext) -> list[PolicyDocument]:
        if not self.directory.is_dir():
            logger.debug(f"Policy directory {self.directory} does not exist")
            return []

        documents = []
        for path in sorted(self.directory.iterdir()):
            if path.suffix.lower() not in POLICY_FILE_SUFFIXES or not path.is_file():
                continue
            ctx.check(source=str(path))
            document = PolicyDocument.from_file(path)
            if document.name is None:
                document = PolicyDocument(name=path.stem, rules=document.rules, kind=document.kind)
            documents.append(document)

        logger.debug(f"Listed {len(documents)} policy documents from {self.directory}")
        return sorted(documents, key=_sort_key)
