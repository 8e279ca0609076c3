"""Tests for main CSS file resolution."""

import pytest
from pathlib import Path
from swatch.build.main_file import (
    MainFileResolver,
    is_build_artifact,
    is_entry_candidate,
    is_partial,
    is_trigger_worthy,
)


class TestNamingRules:
    """Test partial / artifact / entry classification."""

    @pytest.mark.parametrize("name,expected", [
        ("_base.css", True),
        ("_vars.compiled.css", True),
        ("styles.css", False),
        ("base_.css", False),
    ])
    def test_is_partial(self, name, expected):
        assert is_partial(name) is expected

    @pytest.mark.parametrize("name,expected", [
        ("styles.compiled.css", True),
        ("styles.css", False),
        ("compiled.css", False),
        ("styles.compiled.css.map", False),
    ])
    def test_is_build_artifact(self, name, expected):
        assert is_build_artifact(name) is expected

    @pytest.mark.parametrize("name,expected", [
        ("styles.css", True),
        ("_base.css", False),
        ("styles.compiled.css", False),
        ("styles.scss", False),
        ("notes.txt", False),
    ])
    def test_is_entry_candidate(self, name, expected):
        assert is_entry_candidate(name) is expected

    @pytest.mark.parametrize("name,expected", [
        ("styles.css", True),
        ("_base.css", True),
        ("styles.compiled.css", False),
        ("styles.css.map", False),
        ("index.html", False),
    ])
    def test_is_trigger_worthy(self, name, expected):
        assert is_trigger_worthy(name) is expected

    def test_only_basename_is_inspected(self):
        """Leading underscores in parent directories don't make a partial."""
        assert is_entry_candidate(Path("/_private/site/styles.css"))


class TestMainFileResolver:
    """Test entry file resolution."""

    @pytest.fixture
    def project(self, tmp_path):
        """Directory with an entry file, a partial and a build artifact."""
        (tmp_path / "a.css").write_text("@import '_base.css';")
        (tmp_path / "_base.css").write_text("body { color: red; }")
        (tmp_path / "a.compiled.css").write_text("body{color:red}")
        return tmp_path

    def test_init(self, project):
        resolver = MainFileResolver(project)
        assert resolver.working_dir == project

    def test_resolve_partial_hint(self, project):
        resolver = MainFileResolver(project)
        assert resolver.resolve(project / "_base.css") == project / "a.css"

    def test_resolve_artifact_hint(self, project):
        resolver = MainFileResolver(project)
        assert resolver.resolve(project / "a.compiled.css") == project / "a.css"

    def test_resolve_entry_hint(self, project):
        resolver = MainFileResolver(project)
        assert resolver.resolve(project / "a.css") == project / "a.css"

    def test_resolve_without_hint(self, project):
        resolver = MainFileResolver(project)
        assert resolver.resolve() == project / "a.css"

    def test_entry_hint_is_returned_without_scanning(self, project):
        """An eligible hint is used directly, even if a different file sorts first."""
        (project / "0-first.css").write_text("")
        resolver = MainFileResolver(project)
        assert resolver.resolve(project / "a.css") == project / "a.css"

    def test_relative_hint_is_joined_to_working_dir(self, project):
        resolver = MainFileResolver(project)
        assert resolver.resolve("a.css") == project / "a.css"

    def test_vanished_entry_hint_falls_back_to_scan(self, project):
        """A deleted or renamed-away entry file is never returned."""
        resolver = MainFileResolver(project)
        assert resolver.resolve(project / "b.css") == project / "a.css"

    def test_vanished_only_entry_hint_resolves_to_none(self, tmp_path):
        (tmp_path / "_base.css").write_text("")
        resolver = MainFileResolver(tmp_path)
        assert resolver.resolve(tmp_path / "site.css") is None

    def test_scan_order_is_sorted(self, tmp_path):
        for name in ["zeta.css", "beta.css", "alpha.css"]:
            (tmp_path / name).write_text("")
        resolver = MainFileResolver(tmp_path)
        assert resolver.resolve() == tmp_path / "alpha.css"

    def test_single_entry_wins_for_any_ineligible_hint(self, tmp_path):
        (tmp_path / "main.css").write_text("")
        (tmp_path / "_a.css").write_text("")
        (tmp_path / "_b.css").write_text("")
        (tmp_path / "main.compiled.css").write_text("")
        resolver = MainFileResolver(tmp_path)

        for hint in ["_a.css", "_b.css", "main.compiled.css"]:
            assert resolver.resolve(tmp_path / hint) == tmp_path / "main.css"

    def test_not_found_with_only_partials_and_artifacts(self, tmp_path):
        (tmp_path / "_base.css").write_text("")
        (tmp_path / "site.compiled.css").write_text("")
        resolver = MainFileResolver(tmp_path)
        assert resolver.resolve() is None
        assert resolver.resolve(tmp_path / "_base.css") is None

    def test_not_found_in_empty_directory(self, tmp_path):
        assert MainFileResolver(tmp_path).resolve() is None

    def test_scan_is_not_recursive(self, tmp_path):
        nested = tmp_path / "vendor"
        nested.mkdir()
        (nested / "lib.css").write_text("")
        assert MainFileResolver(tmp_path).resolve() is None

    def test_scan_ignores_directories_named_css(self, tmp_path):
        (tmp_path / "odd.css").mkdir()
        (tmp_path / "real.css").write_text("")
        resolver = MainFileResolver(tmp_path)
        assert resolver.scan() == [tmp_path / "real.css"]

    def test_scan_missing_directory(self, tmp_path):
        assert MainFileResolver(tmp_path / "missing").scan() == []
