"""Tests for asset_renderer.conf module.

## Decision table: DT-GET-SETTING

| ID  | User setting | default arg | DEFAULTS key | Expected return        |
|-----|-------------|-------------|-------------|------------------------|
| DT1 | present     | _UNSET      | present     | user setting value     |
| DT2 | present     | explicit    | present     | user setting value     |
| DT3 | absent      | _UNSET      | present     | DEFAULTS value         |
| DT4 | absent      | explicit    | present     | explicit default value |
| DT5 | absent      | None        | present     | None (not DEFAULTS)    |
| DT6 | absent      | _UNSET      | absent      | None                   |

## Decision table: DT-RESOLVE-MINIFY

| ID  | argument | MINIFY setting | DEBUG | Expected |
|-----|----------|----------------|-------|----------|
| DT1 | True     | False          | True  | True     |
| DT2 | False    | True           | False | False    |
| DT3 | None     | True           | True  | True     |
| DT4 | None     | None           | False | True     |
| DT5 | None     | None           | True  | False    |
"""

from unittest import mock

import pytest
from django.test import override_settings

from asset_renderer.conf import DEFAULTS, find_executable, get_setting, resolve_minify


class TestGetSettingDecisionTable:
    """Decision table coverage for get_setting() priority logic."""

    @pytest.mark.parametrize(
        "user_settings,key,kwargs,expected",
        [
            pytest.param(
                {"SCRIPT_BUILDER": "custom.Builder"},
                "SCRIPT_BUILDER",
                {},
                "custom.Builder",
                id="DT1-user-setting-wins-over-defaults",
            ),
            pytest.param(
                {"SCRIPT_BUILDER": "custom.Builder"},
                "SCRIPT_BUILDER",
                {"default": "fallback.Builder"},
                "custom.Builder",
                id="DT2-user-setting-wins-over-explicit-default",
            ),
            pytest.param(
                {},
                "SCRIPT_BUILDER",
                {},
                DEFAULTS["SCRIPT_BUILDER"],
                id="DT3-no-user-setting-returns-defaults-value",
            ),
            pytest.param(
                {},
                "SCRIPT_BUILDER",
                {"default": "fallback.Builder"},
                "fallback.Builder",
                id="DT4-explicit-default-overrides-defaults",
            ),
            pytest.param(
                {},
                "SCRIPT_BUILDER",
                {"default": None},
                None,
                id="DT5-explicit-none-default-returns-none",
            ),
            pytest.param(
                {},
                "NONEXISTENT_KEY",
                {},
                None,
                id="DT6-unknown-key-returns-none",
            ),
        ],
    )
    def test_get_setting(self, user_settings, key, kwargs, expected):
        """DT-GET-SETTING: verify priority of user settings > default arg > DEFAULTS.

        Purpose: Verify get_setting() returns the correct value based on the
            priority chain: user_settings > explicit default > DEFAULTS > None.
        Category: Normal case
        Target: get_setting(key, default)
        Technique: Decision table (DT-GET-SETTING)
        Test data: All 6 combinations from decision table
        """
        with mock.patch("asset_renderer.conf.settings") as mock_settings:
            mock_settings.ASSET_RENDERER = user_settings

            result = get_setting(key, **kwargs)

        assert result == expected

    def test_get_setting_without_asset_renderer_attr(self):
        """Settings object without ASSET_RENDERER returns DEFAULTS value.

        Purpose: Verify graceful handling when ASSET_RENDERER is not defined
            in Django settings.
        Category: Edge case
        Target: get_setting(key)
        Technique: Error guessing (missing attribute)
        Test data: Mock settings without ASSET_RENDERER attribute
        """
        mock_settings = mock.Mock(spec=[])

        with mock.patch("asset_renderer.conf.settings", mock_settings):
            result = get_setting("CACHE_MAX_AGE")

        assert result == 3600

    def test_get_setting_user_value_is_zero(self):
        """User setting with zero value is returned (not treated as missing).

        Purpose: Verify that a zero max-age is respected.
        Category: Edge case
        Target: get_setting(key)
        Technique: Boundary value analysis (zero value)
        Test data: 0 as user setting for CACHE_MAX_AGE
        """
        with mock.patch("asset_renderer.conf.settings") as mock_settings:
            mock_settings.ASSET_RENDERER = {"CACHE_MAX_AGE": 0}

            result = get_setting("CACHE_MAX_AGE")

        assert result == 0


class TestResolveMinify:
    """Decision table coverage for resolve_minify()."""

    @pytest.mark.parametrize(
        "argument,configured,debug,expected",
        [
            pytest.param(True, False, True, True, id="DT1-argument-wins"),
            pytest.param(False, True, False, False, id="DT2-false-argument-wins"),
            pytest.param(None, True, True, True, id="DT3-setting-wins-over-debug"),
            pytest.param(None, None, False, True, id="DT4-production-minifies"),
            pytest.param(None, None, True, False, id="DT5-development-does-not"),
        ],
    )
    def test_resolve_minify(self, argument, configured, debug, expected):
        """DT-RESOLVE-MINIFY: explicit > MINIFY setting > not DEBUG.

        Purpose: Verify the default minify policy follows the execution mode
            and stays overridable per call.
        Category: Normal case
        Target: resolve_minify(minify)
        Technique: Decision table (DT-RESOLVE-MINIFY)
        Test data: All 5 rows of the decision table
        """
        with override_settings(DEBUG=debug, ASSET_RENDERER={"MINIFY": configured}):
            assert resolve_minify(argument) is expected


class TestFindExecutable:
    """Tests for find_executable() search order."""

    def test_explicit_setting_wins(self, tmp_path):
        """A configured path is returned without searching.

        Purpose: Verify the explicit setting takes priority.
        Category: Normal case
        Target: find_executable(setting_key, name)
        Technique: Equivalence partitioning
        Test data: TERSER_PATH setting
        """
        with override_settings(ASSET_RENDERER={"TERSER_PATH": "/opt/terser"}):
            assert find_executable("TERSER_PATH", "terser") == "/opt/terser"

    def test_node_modules_bin(self, tmp_path):
        """node_modules/.bin under BASE_DIR is used when present.

        Purpose: Verify the project-local binary is found before PATH.
        Category: Normal case
        Target: find_executable(setting_key, name)
        Technique: Equivalence partitioning
        Test data: BASE_DIR with node_modules/.bin/esbuild
        """
        local = tmp_path / "node_modules" / ".bin" / "esbuild"
        local.parent.mkdir(parents=True)
        local.write_text("#!/bin/sh\n")

        with override_settings(BASE_DIR=str(tmp_path), ASSET_RENDERER={}):
            assert find_executable("ESBUILD_PATH", "esbuild") == str(local)

    def test_path_lookup(self, tmp_path):
        """Falls back to PATH through shutil.which.

        Purpose: Verify the PATH lookup is the last resort.
        Category: Normal case
        Target: find_executable(setting_key, name)
        Technique: Equivalence partitioning
        Test data: Empty BASE_DIR and mocked shutil.which
        """
        with (
            override_settings(BASE_DIR=str(tmp_path), ASSET_RENDERER={}),
            mock.patch(
                "asset_renderer.conf.shutil.which", return_value="/usr/bin/postcss"
            ) as mock_which,
        ):
            assert find_executable("POSTCSS_PATH", "postcss") == "/usr/bin/postcss"

        mock_which.assert_called_once_with("postcss")

    def test_not_found_returns_none(self, tmp_path):
        """None is returned when the tool is nowhere to be found.

        Purpose: Verify callers can detect a missing executable.
        Category: Edge case
        Target: find_executable(setting_key, name)
        Technique: Error guessing
        Test data: Mocked shutil.which returning None
        """
        with (
            override_settings(BASE_DIR=str(tmp_path), ASSET_RENDERER={}),
            mock.patch("asset_renderer.conf.shutil.which", return_value=None),
        ):
            assert find_executable("TERSER_PATH", "terser") is None


class TestDefaultValues:
    def test_defaults_contains_required_keys(self):
        """DEFAULTS contains every key the pipeline reads.

        Purpose: Verify that DEFAULTS has all configuration keys.
        Category: Normal case
        Target: DEFAULTS dict
        Technique: Equivalence partitioning
        Test data: Set of required key names
        """
        required_keys = {
            "SOURCE",
            "SKIP",
            "HIDE_HTML_EXTENSION",
            "MINIFY",
            "CACHE_MAX_AGE",
            "DISPLAY_ERRORS",
            "SCRIPT_BUILDER",
            "STYLE_BUILDER",
            "STYLE_OPTIMIZER",
            "JSX_FACTORY",
            "TERSER_OPTIONS",
        }

        assert required_keys.issubset(set(DEFAULTS.keys()))

    def test_jsx_factory_default(self):
        """JSX elements lower to Aviation.element by default.

        Purpose: Verify the default JSX factory.
        Category: Normal case
        Target: DEFAULTS["JSX_FACTORY"]
        Technique: Equivalence partitioning
        Test data: DEFAULTS dict value
        """
        assert DEFAULTS["JSX_FACTORY"] == "Aviation.element"
