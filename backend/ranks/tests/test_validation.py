# ranks/tests/test_validation.py
"""
Tests for manifest/router consistency checks.

The live registry must validate clean; synthetic registries exercise
each failure mode on its own.
"""

import pytest
from django.core.management import CommandError, call_command

from ranks.hierarchy import Rank
from ranks.manifests import NavItem, RankManifest
from ranks.validation import validate_manifests, validate_registry, view_exists


def _manifest(rank, allowed, nav=()):
    allowed = frozenset(allowed)
    return RankManifest(id=rank, label=rank.label, home="/", allowed=allowed, nav=tuple(nav))


class TestLiveRegistry:
    def test_live_registry_has_no_errors_or_warnings(self):
        report = validate_registry()
        assert report.ok, report.errors
        assert report.warnings == []

    def test_command_succeeds(self, capsys):
        call_command("validate_manifest")
        out = capsys.readouterr().out
        assert "Manifests valid" in out
        assert "FRONTEND_VIEWS_DIR not set" in out

    def test_command_checks_view_files(self, tmp_path, capsys):
        # Empty views directory: every allowlisted view is missing.
        with pytest.raises(CommandError, match="Manifest validation failed"):
            call_command("validate_manifest", views_dir=str(tmp_path))
        assert "does not exist" in capsys.readouterr().out

    def test_command_rejects_missing_views_dir(self, tmp_path):
        with pytest.raises(CommandError, match="Views directory not found"):
            call_command("validate_manifest", views_dir=str(tmp_path / "nope"))


class TestSyntheticRegistry:
    def test_clean(self):
        manifests = [_manifest(Rank.CREW, {"/", "/a"}, [NavItem("/a", "A")])]
        report = validate_manifests(manifests, {"/": "Home", "/a": "A"})
        assert report.ok
        assert report.warnings == []

    def test_router_route_unreachable_is_error(self):
        manifests = [_manifest(Rank.CREW, {"/"})]
        report = validate_manifests(manifests, {"/": "Home", "/secret": "Secret"})
        assert not report.ok
        assert any("'/secret' is not allowlisted" in e for e in report.errors)
        assert any("'/secret' is orphaned" in w for w in report.warnings)

    def test_allowlisted_route_without_view_is_error(self):
        manifests = [_manifest(Rank.CAPTAIN, {"/", "/ghost"})]
        report = validate_manifests(manifests, {"/": "Home"})
        assert any("[captain] allowlisted route '/ghost' has no router view" in e for e in report.errors)
        assert any("'/ghost' is not dispatchable" in w for w in report.warnings)

    def test_nav_outside_allowlist_is_error(self):
        manifests = [_manifest(Rank.CREW, {"/"}, [NavItem("/", "Home"), NavItem("/elsewhere", "X")])]
        report = validate_manifests(manifests, {"/": "Home", "/elsewhere": "X"})
        assert any("[crew] nav route '/elsewhere'" in e for e in report.errors)

    def test_nested_nav_is_checked(self):
        nav = [NavItem("/", "Home", children=(NavItem("/deep", "Deep"),))]
        manifests = [_manifest(Rank.CREW, {"/"}, nav)]
        report = validate_manifests(manifests, {"/": "Home"})
        assert any("'/deep'" in e for e in report.errors)

    def test_overview_routes_are_exempt(self):
        manifests = [_manifest(Rank.CREW, {"/", "/finance"}, [NavItem("/finance", "Finance")])]
        report = validate_manifests(manifests, {"/": "Home"}, overview_routes={"/finance"})
        assert report.ok
        assert report.warnings == []

    def test_missing_view_file_is_error(self, tmp_path):
        (tmp_path / "Home.tsx").write_text("export default null")
        manifests = [_manifest(Rank.CREW, {"/", "/a"})]
        report = validate_manifests(
            manifests, {"/": "Home", "/a": "pages/A"}, views_dir=tmp_path
        )
        assert report.errors == ["[crew] view 'pages/A' for '/a' does not exist."]


def test_view_exists_tries_each_extension(tmp_path):
    (tmp_path / "settings").mkdir()
    (tmp_path / "settings" / "Account.jsx").write_text("")
    assert view_exists("settings/Account", tmp_path)
    assert not view_exists("settings/Billing", tmp_path)
    assert view_exists("anything", None)
