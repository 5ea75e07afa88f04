"""Tests for policy sources and listers."""

import pytest
import yaml

from pull_alternates.context import ResolveContext
from pull_alternates.exceptions import ConfigLoadError, LoadCancelledError, PolicyFormatError
from pull_alternates.sources import (
    DirectoryPolicyLister,
    EmptyPolicySource,
    FilePolicySource,
    ListerPolicySource,
    PolicyLister,
    PolicySource,
    StaticPolicyLister,
)


class TestFilePolicySource:
    """Tests for FilePolicySource."""

    def test_load(self, icsp_file):
        """Test the file yields exactly one document."""
        docs = FilePolicySource(icsp_file).load(ResolveContext())
        assert len(docs) == 1
        assert docs[0].name == "release"

    def test_describe(self, icsp_file):
        assert str(icsp_file) in FilePolicySource(icsp_file).describe()

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigLoadError):
            FilePolicySource(tmp_path / "nope.yaml").load(ResolveContext())

    def test_implements_protocol(self, icsp_file):
        assert isinstance(FilePolicySource(icsp_file), PolicySource)


class TestListerPolicySource:
    """Tests for ListerPolicySource."""

    def test_preserves_lister_order(self, counting_lister, make_document):
        """Test documents are passed through in the order listed."""
        docs = [make_document("zeta"), make_document("alpha")]
        source = ListerPolicySource(counting_lister(docs))
        assert [d.name for d in source.load(ResolveContext())] == ["zeta", "alpha"]

    def test_none_is_empty(self, counting_lister):
        """Test a missing collection is not an error."""
        assert ListerPolicySource(counting_lister(None)).load(ResolveContext()) == []

    def test_lister_error_wrapped(self, counting_lister):
        """Test arbitrary lister failures become ConfigLoadError."""
        source = ListerPolicySource(counting_lister(error=RuntimeError("api down")))
        with pytest.raises(ConfigLoadError, match="api down") as exc_info:
            source.load(ResolveContext())
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_config_load_error_not_rewrapped(self, counting_lister):
        """Test ConfigLoadError from a lister propagates unchanged."""
        error = PolicyFormatError("bad document")
        source = ListerPolicySource(counting_lister(error=error))
        with pytest.raises(PolicyFormatError) as exc_info:
            source.load(ResolveContext())
        assert exc_info.value is error

    def test_describe_names_lister(self, counting_lister):
        assert "CountingLister" in ListerPolicySource(counting_lister([])).describe()


class TestEmptyPolicySource:
    def test_load(self):
        assert EmptyPolicySource().load(ResolveContext()) == []


class TestStaticPolicyLister:
    """Tests for StaticPolicyLister."""

    def test_sorted_by_name(self, make_document):
        lister = StaticPolicyLister([make_document("release"), make_document("another")])
        assert [d.name for d in lister.list(ResolveContext())] == ["another", "release"]

    def test_unsorted(self, make_document):
        lister = StaticPolicyLister([make_document("release"), make_document("another")], sort=False)
        assert [d.name for d in lister.list(ResolveContext())] == ["release", "another"]

    def test_implements_protocol(self):
        assert isinstance(StaticPolicyLister([]), PolicyLister)


class TestDirectoryPolicyLister:
    """Tests for DirectoryPolicyLister."""

    def _write(self, directory, filename, document):
        (directory / filename).write_text(yaml.safe_dump(document.to_dict()))

    def test_sorted_by_document_name(self, tmp_path, make_document):
        """Test that metadata.name, not file name, decides the order."""
        self._write(tmp_path, "a.yaml", make_document("release", ("quay.io/a/b", ["m.io/a/b"])))
        self._write(tmp_path, "b.yml", make_document("another", ("quay.io/a/b", ["n.io/a/b"])))
        docs = DirectoryPolicyLister(tmp_path).list(ResolveContext())
        assert [d.name for d in docs] == ["another", "release"]

    def test_unnamed_uses_file_stem(self, tmp_path, make_document):
        self._write(tmp_path, "mirrors.yaml", make_document(None, ("quay.io/a/b", ["m.io/a/b"])))
        docs = DirectoryPolicyLister(tmp_path).list(ResolveContext())
        assert docs[0].name == "mirrors"

    def test_ignores_other_files(self, tmp_path, make_document):
        self._write(tmp_path, "policy.yaml", make_document("policy"))
        (tmp_path / "README.md").write_text("not a policy")
        (tmp_path / "nested.yaml").mkdir()
        docs = DirectoryPolicyLister(tmp_path).list(ResolveContext())
        assert [d.name for d in docs] == ["policy"]

    def test_missing_directory(self, tmp_path):
        assert DirectoryPolicyLister(tmp_path / "absent").list(ResolveContext()) == []

    def test_malformed_file(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("kind: Secret\n")
        with pytest.raises(PolicyFormatError):
            DirectoryPolicyLister(tmp_path).list(ResolveContext())

    def test_cancelled(self, tmp_path, make_document):
        """Test a cancelled context stops enumeration."""
        self._write(tmp_path, "policy.yaml", make_document("policy"))
        ctx = ResolveContext()
        ctx.cancel()
        with pytest.raises(LoadCancelledError):
            DirectoryPolicyLister(tmp_path).list(ctx)

    def test_numeric_name_is_format_error(self, tmp_path, make_document):
        """Test a non-string name fails as a format error before sorting."""
        self._write(tmp_path, "a.yaml", make_document("release"))
        (tmp_path / "b.yaml").write_text("metadata:\n  name: 2024\nspec: {}\n")
        with pytest.raises(PolicyFormatError, match="metadata.name"):
            DirectoryPolicyLister(tmp_path).list(ResolveContext())
