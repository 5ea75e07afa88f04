"""Pytest configuration and fixtures."""

import threading
import time

import pytest

ICSP_YAML = """\
apiVersion: operator.openshift.io/v1alpha1
kind: ImageContentSourcePolicy
metadata:
  name: release
spec:
  repositoryDigestMirrors:
  - mirrors:
    - does.not.exist/match/image
    source: docker.io/ocp-test/does-not-exist
  - mirrors:
    - exists/match/image
    source: quay.io/ocp-test/does-not-exist
"""


@pytest.fixture
def icsp_file(tmp_path):
    """Single ImageContentSourcePolicy document on disk."""
    path = tmp_path / "icsp.yaml"
    path.write_text(ICSP_YAML)
    return path


def _make_document(name, *rules):
    """Build a PolicyDocument from (source, [mirrors]) pairs."""
    from pull_alternates.policy import MirrorRule, PolicyDocument

    return PolicyDocument(
        name=name,
        rules=tuple(MirrorRule(source=source, mirrors=tuple(mirrors)) for source, mirrors in rules),
    )


@pytest.fixture
def make_document():
    """Factory for PolicyDocument instances."""
    return _make_document


class CountingLister:
    """Lister double that records every enumeration."""

    def __init__(self, documents=None, error=None, delay=0.0):
        self.documents = documents
        self.error = error
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def list(self, ctx):
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.documents


@pytest.fixture
def counting_lister():
    """Factory for CountingLister instances."""
    return CountingLister
