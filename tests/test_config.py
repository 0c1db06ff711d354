"""
Tests for msixmaker.config.loader module.

Tests configuration loading and merging including:
- YAML file loading
- Two-layer merging (defaults -> build config)
- Path resolution
- Field validation in BuildConfig.from_dict
- Error handling
"""

from __future__ import annotations

from pathlib import Path

import pytest

from msixmaker.config import (
    BuildConfig,
    CopilotKeyAction,
    ProtocolSpec,
    load_build_config,
    load_config_dict,
)
from msixmaker.exceptions import ConfigError

pytestmark = pytest.mark.unit


class TestConfigLoading:
    """Tests for basic configuration loading."""

    def test_load_minimal_config(self, create_yaml_file):
        """Test loading a config with only app_icon."""
        config_path = create_yaml_file("msix.yaml", {"app_icon": "icon.png"})

        config = load_build_config(config_path)

        assert config.app_icon == config_path.parent.resolve() / "icon.png"
        assert config.publisher is None
        assert config.make_appinstaller is None
        assert config.asset_workers == 4
        assert config.pack_from_mapping is False

    def test_missing_config_file_raises(self, tmp_test_dir):
        """Test that a missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_build_config(tmp_test_dir / "nonexistent.yaml")

    def test_invalid_yaml_raises(self, tmp_test_dir):
        """Test that invalid YAML raises ConfigError."""
        config_path = tmp_test_dir / "bad.yaml"
        config_path.write_text("app_icon: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_build_config(config_path)

    def test_empty_yaml_raises(self, tmp_test_dir):
        """Test that an empty document raises ConfigError."""
        config_path = tmp_test_dir / "empty.yaml"
        config_path.write_text("", encoding="utf-8")

        with pytest.raises(ConfigError, match="empty"):
            load_build_config(config_path)

    def test_top_level_list_raises(self, tmp_test_dir):
        """Test that a non-mapping document raises ConfigError."""
        config_path = tmp_test_dir / "list.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="mapping"):
            load_build_config(config_path)


class TestConfigMerging:
    """Tests for defaults merging behavior."""

    def _write_defaults(self, root: Path, text: str) -> Path:
        defaults_dir = root / "defaults"
        defaults_dir.mkdir(parents=True, exist_ok=True)
        path = defaults_dir / "msix.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_defaults_found_upward(self, tmp_test_dir):
        """Test that defaults/msix.yaml above the config is picked up."""
        self._write_defaults(tmp_test_dir, "publisher: CN=Shared\n")
        config_dir = tmp_test_dir / "apps" / "myapp"
        config_dir.mkdir(parents=True)
        config_path = config_dir / "msix.yaml"
        config_path.write_text("app_icon: icon.png\n", encoding="utf-8")

        config = load_build_config(config_path)

        assert config.publisher == "CN=Shared"

    def test_dict_deep_merge(self, tmp_test_dir):
        """Test that nested sections are deep-merged."""
        self._write_defaults(
            tmp_test_dir,
            """
codesign:
  timestamp_server: http://timestamp.example.com
  certificate_sha1: ABC123
""",
        )
        config_path = tmp_test_dir / "msix.yaml"
        config_path.write_text(
            "app_icon: icon.png\ncodesign:\n  certificate_sha1: DEF456\n",
            encoding="utf-8",
        )

        config = load_build_config(config_path)

        assert config.codesign is not None
        assert config.codesign.timestamp_server == "http://timestamp.example.com"
        assert config.codesign.certificate_sha1 == "DEF456"

    def test_list_replaced(self, tmp_test_dir):
        """Test that lists from the config replace the defaults."""
        self._write_defaults(
            tmp_test_dir, "app_capabilities:\n  - Microphone\n  - Webcam\n"
        )
        config_path = tmp_test_dir / "msix.yaml"
        config_path.write_text(
            "app_icon: icon.png\napp_capabilities:\n  - GraphicsCapture\n",
            encoding="utf-8",
        )

        config = load_build_config(config_path)

        assert config.app_capabilities == ("GraphicsCapture",)

    def test_explicit_defaults_path(self, tmp_test_dir, create_yaml_file):
        """Test that an explicit defaults file is used instead of searching."""
        defaults = create_yaml_file("shared/base.yaml", {"publisher": "CN=Explicit"})
        config_path = create_yaml_file("app/msix.yaml", {"app_icon": "icon.png"})

        config = load_build_config(config_path, defaults_path=defaults)

        assert config.publisher == "CN=Explicit"

    def test_defaults_paths_relative_to_defaults_file(self, tmp_test_dir):
        """Test that tool paths in the defaults resolve against that file."""
        self._write_defaults(tmp_test_dir, "tools:\n  makeappx: bin/makeappx.exe\n")
        config_dir = tmp_test_dir / "apps"
        config_dir.mkdir()
        config_path = config_dir / "msix.yaml"
        config_path.write_text("app_icon: icon.png\n", encoding="utf-8")

        config = load_build_config(config_path)

        assert config.tools.makeappx == (
            tmp_test_dir.resolve() / "defaults" / "bin" / "makeappx.exe"
        )
        assert config.app_icon == config_dir.resolve() / "icon.png"

    def test_absolute_paths_unchanged(self, tmp_test_dir, create_yaml_file):
        """Test that absolute paths are left alone."""
        absolute = str(tmp_test_dir.resolve() / "elsewhere" / "icon.png")
        config_path = create_yaml_file("msix.yaml", {"app_icon": absolute})

        merged = load_config_dict(config_path)

        assert merged["app_icon"] == absolute


class TestBuildConfigFromDict:
    """Tests for BuildConfig.from_dict field handling."""

    def test_missing_app_icon(self):
        """Test that app_icon is required."""
        with pytest.raises(ConfigError, match="app_icon"):
            BuildConfig.from_dict({"publisher": "CN=x"})

    def test_not_a_mapping(self):
        """Test that a non-dict raises ConfigError."""
        with pytest.raises(ConfigError, match="mapping"):
            BuildConfig.from_dict(["app_icon"])  # type: ignore[arg-type]

    def test_unknown_capability(self):
        """Test that unsupported capabilities are rejected."""
        with pytest.raises(ConfigError, match="Unknown app_capabilities: Bluetooth"):
            BuildConfig.from_dict(
                {"app_icon": "i.png", "app_capabilities": ["Microphone", "Bluetooth"]}
            )

    def test_bool_field_type(self):
        """Test that boolean toggles reject strings."""
        with pytest.raises(ConfigError, match="exe_alias"):
            BuildConfig.from_dict({"app_icon": "i.png", "exe_alias": "yes"})

    @pytest.mark.parametrize("workers", [0, -1, "4", True])
    def test_asset_workers_validation(self, workers):
        """Test that asset_workers must be a positive integer."""
        with pytest.raises(ConfigError, match="asset_workers"):
            BuildConfig.from_dict({"app_icon": "i.png", "asset_workers": workers})

    def test_tool_timeout(self):
        """Test that tool_timeout becomes a float and rejects strings."""
        config = BuildConfig.from_dict({"app_icon": "i.png", "tool_timeout": 120})
        assert config.tool_timeout == 120.0

        with pytest.raises(ConfigError, match="tool_timeout"):
            BuildConfig.from_dict({"app_icon": "i.png", "tool_timeout": "2m"})

    def test_protocols(self):
        """Test protocol groups and their validation."""
        config = BuildConfig.from_dict(
            {
                "app_icon": "i.png",
                "protocols": [{"name": "MyApp", "schemes": ["myapp", "myapp-dev"]}],
            }
        )
        assert config.protocols == (ProtocolSpec("MyApp", ("myapp", "myapp-dev")),)

        with pytest.raises(ConfigError, match="no schemes"):
            BuildConfig.from_dict(
                {"app_icon": "i.png", "protocols": [{"name": "MyApp", "schemes": []}]}
            )

    def test_copilot_key(self):
        """Test copilot key actions with optional wparam."""
        config = BuildConfig.from_dict(
            {
                "app_icon": "i.png",
                "copilot_key": {
                    "tap": {"url": "myapp://tap", "wparam": 1},
                    "start": {"url": "myapp://start"},
                },
            }
        )

        assert config.copilot_key is not None
        assert config.copilot_key.tap == CopilotKeyAction("myapp://tap", 1)
        assert config.copilot_key.start == CopilotKeyAction("myapp://start")
        assert config.copilot_key.stop is None

    def test_copilot_key_needs_url(self):
        """Test that a copilot key action without url is rejected."""
        with pytest.raises(ConfigError, match="copilot_key.stop"):
            BuildConfig.from_dict(
                {"app_icon": "i.png", "copilot_key": {"stop": {"wparam": 2}}}
            )

    def test_updater_defaults(self):
        """Test that the updater channel defaults to latest."""
        config = BuildConfig.from_dict(
            {"app_icon": "i.png", "updater": {"url": "https://example.com/dl"}}
        )

        assert config.updater is not None
        assert config.updater.channel == "latest"

    def test_updater_requires_url(self):
        """Test that an updater section without url is rejected."""
        with pytest.raises(ConfigError, match="updater.url"):
            BuildConfig.from_dict({"app_icon": "i.png", "updater": {"channel": "beta"}})

    def test_config_is_frozen(self):
        """Test that BuildConfig is immutable."""
        config = BuildConfig.from_dict({"app_icon": "i.png"})

        with pytest.raises(AttributeError):
            config.publisher = "CN=x"  # type: ignore[misc]
