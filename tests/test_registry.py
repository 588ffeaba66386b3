"""
Unit Tests for the Mapping Registry

Tests path validation, duplicate detection, option merging and the
per-mapping lifecycle operations.

Author: dirmirror Project
License: MIT
"""

import os
import pytest
from pathlib import Path

from dirmirror.core.registry import MirrorRegistry, merge_options, normalize_path
from dirmirror.core.exceptions import DuplicateSourceError, InvalidArgumentError
from dirmirror.config.schema import MirrorOptions, accept_all


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run each test from an empty working directory."""
    monkeypatch.chdir(tmp_path)
    return Path(os.getcwd())


class TestAddMapping:
    """Test suite for MirrorRegistry.add."""

    def test_add_creates_both_directories(self, workdir):
        """Test that source and destination are created when missing."""
        registry = MirrorRegistry()

        registry.add("src/imgs", "dist/imgs")

        assert (workdir / "src" / "imgs").is_dir()
        assert (workdir / "dist" / "imgs").is_dir()

    def test_add_stores_absolute_paths(self, workdir):
        """Test that relative paths are resolved against the working directory."""
        registry = MirrorRegistry()

        mapping = registry.add("src/imgs", "dist/imgs")

        assert mapping.source == str(workdir / "src" / "imgs")
        assert mapping.destination == str(workdir / "dist" / "imgs")
        assert os.path.isabs(mapping.source)

    def test_add_keeps_existing_content(self, workdir):
        """Test that existing directories are left untouched."""
        (workdir / "src").mkdir()
        (workdir / "src" / "keep.txt").write_text("keep")
        registry = MirrorRegistry()

        registry.add("src", "dist")

        assert (workdir / "src" / "keep.txt").read_text() == "keep"

    def test_add_accepts_path_objects(self, workdir):
        """Test that os.PathLike paths are accepted."""
        registry = MirrorRegistry()

        mapping = registry.add(workdir / "a", workdir / "b")

        assert mapping.source == str(workdir / "a")

    @pytest.mark.parametrize("bad", ["", "   ", None, 42, ["src"]])
    def test_invalid_source_rejected(self, workdir, bad):
        """Test that empty or non-string sources are rejected."""
        registry = MirrorRegistry()

        with pytest.raises(InvalidArgumentError):
            registry.add(bad, "dist")

        assert len(registry) == 0
        assert not (workdir / "dist").exists()

    @pytest.mark.parametrize("bad", ["", "\t", None, 3.5])
    def test_invalid_destination_rejected(self, workdir, bad):
        """Test that empty or non-string destinations are rejected."""
        registry = MirrorRegistry()

        with pytest.raises(InvalidArgumentError):
            registry.add("src", bad)

        assert len(registry) == 0
        assert not (workdir / "src").exists()

    def test_invalid_argument_is_value_error(self, workdir):
        """Test that InvalidArgumentError can be caught as ValueError."""
        with pytest.raises(ValueError, match="non-empty strings"):
            MirrorRegistry().add("", "dist")

    def test_duplicate_raw_source_rejected(self, workdir):
        """Test that adding the identical source string twice fails."""
        registry = MirrorRegistry()
        registry.add("src/imgs", "dist/imgs")

        with pytest.raises(DuplicateSourceError, match="already added"):
            registry.add("src/imgs", "dist/other")

        assert len(registry) == 1

    def test_duplicate_detection_normalizes_both_sides(self, workdir):
        """
        Test that different spellings of the same directory are duplicates.

        Both the stored and the incoming source are normalized before
        comparison, so relative, dotted and absolute spellings collide.
        """
        registry = MirrorRegistry()
        registry.add("src/imgs", "dist/imgs")

        for spelling in ("./src/imgs", "src/imgs/", "src/../src/imgs", str(workdir / "src" / "imgs")):
            with pytest.raises(DuplicateSourceError):
                registry.add(spelling, "dist/other")

        assert len(registry) == 1

    def test_same_destination_allowed(self, workdir):
        """Test that two sources may share a destination."""
        registry = MirrorRegistry()

        registry.add("a", "dist")
        registry.add("b", "dist")

        assert len(registry) == 2

    def test_insertion_order_preserved(self, workdir):
        """Test that mappings are listed in the order they were added."""
        registry = MirrorRegistry()
        for name in ("c", "a", "b"):
            registry.add(name, f"dist/{name}")

        assert [Path(m.source).name for m in registry] == ["c", "a", "b"]


class TestOptionMerging:
    """Test suite for field-by-field option merging."""

    def test_defaults(self):
        """Test default option values."""
        options = merge_options(None)

        assert options.overwrite is True
        assert options.error_on_exist is False
        assert options.filter is accept_all
        assert options.filter("/anything") is True

    def test_partial_override_keeps_other_defaults(self):
        """Test that unspecified keys keep their default."""
        options = merge_options({"overwrite": False})

        assert options.overwrite is False
        assert options.error_on_exist is False
        assert options.filter is accept_all

    def test_camel_case_key_accepted(self):
        """Test that errorOnExist is accepted as an alias."""
        options = merge_options({"overwrite": False, "errorOnExist": True})

        assert options.error_on_exist is True

    def test_filter_override(self):
        """Test that a custom filter replaces the default."""
        def no_tmp(path):
            return not path.endswith(".tmp")

        options = merge_options({"filter": no_tmp})

        assert options.filter is no_tmp
        assert options.overwrite is True

    def test_none_filter_means_accept_all(self):
        """Test that an explicit None filter falls back to accept-all."""
        options = merge_options({"filter": None})

        assert options.filter is accept_all

    def test_options_instance_merged(self):
        """Test merging from a MirrorOptions instance."""
        options = merge_options(MirrorOptions(error_on_exist=True))

        assert options.error_on_exist is True
        assert options.overwrite is True

    def test_unknown_key_rejected(self):
        """Test that unknown option keys are rejected."""
        with pytest.raises(InvalidArgumentError):
            merge_options({"overwrit": False})

    def test_wrong_option_type_rejected(self):
        """Test that non-mapping options are rejected."""
        with pytest.raises(InvalidArgumentError):
            merge_options(["overwrite"])

    def test_non_callable_filter_rejected(self):
        """Test that a filter must be callable."""
        with pytest.raises(InvalidArgumentError):
            merge_options({"filter": "*.txt"})

    def test_add_stores_merged_options(self, workdir):
        """Test that add stores the merged options on the mapping."""
        mapping = MirrorRegistry().add("src", "dist", {"overwrite": False})

        assert mapping.options.overwrite is False
        assert mapping.options.error_on_exist is False


class TestRegistryLifecycle:
    """Test suite for lookups and removal by identifier."""

    def test_mapping_ids_are_unique(self, workdir):
        """Test that every mapping gets its own identifier."""
        registry = MirrorRegistry()
        first = registry.add("a", "x")
        second = registry.add("b", "y")

        assert first.id != second.id
        assert first.id in registry
        assert registry.get(second.id) is second

    def test_remove_allows_re_adding_source(self, workdir):
        """Test that a removed source can be registered again."""
        registry = MirrorRegistry()
        mapping = registry.add("a", "x")

        removed = registry.remove(mapping.id)
        again = registry.add("a", "y")

        assert removed is mapping
        assert len(registry) == 1
        assert again.destination == str(workdir / "y")

    def test_remove_unknown_id_raises(self, workdir):
        """Test that removing an unknown id raises KeyError."""
        with pytest.raises(KeyError):
            MirrorRegistry().remove("missing")

    def test_find_by_source(self, workdir):
        """Test lookup by any spelling of the source path."""
        registry = MirrorRegistry()
        mapping = registry.add("a", "x")

        assert registry.find_by_source("./a") is mapping
        assert registry.find_by_source("b") is None

    def test_clear(self, workdir):
        """Test that clear forgets every mapping."""
        registry = MirrorRegistry()
        registry.add("a", "x")
        registry.add("b", "y")

        registry.clear()

        assert len(registry) == 0
        assert registry.mappings == []

    def test_normalize_path(self, workdir):
        """Test path normalization against the working directory."""
        assert normalize_path("a/./b/../c") == str(workdir / "a" / "c")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
