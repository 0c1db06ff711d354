"""
Tests for msixmaker.build.assets module.

Tests tile asset generation including:
- Pixel dimensions for every shape and scale
- Mapping size (scaled tiles plus unscaled aliases)
- Banner compositing versus plain contain-resize
- Tile file naming
"""

from __future__ import annotations

from dataclasses import replace

from PIL import Image
import pytest

from msixmaker.build.assets import (
    REQUIRED_DIMENSIONS,
    REQUIRED_SCALES,
    ImageDimensionSpec,
    generate_assets,
    render_banner,
    render_contained,
)

pytestmark = pytest.mark.unit

APP_ID = "MYAPP"


def _pixel(path, xy):
    with Image.open(path) as image:
        return image.convert("RGBA").getpixel(xy)


class TestImageDimensionSpec:
    """Tests for ImageDimensionSpec helpers."""

    @pytest.mark.parametrize(
        "dims, scale, expected",
        [
            (ImageDimensionSpec(44, 44), 125, (55, 55)),
            (ImageDimensionSpec(71, 71), 125, (88, 88)),
            (ImageDimensionSpec(71, 71), 150, (106, 106)),
            (ImageDimensionSpec(310, 150), 400, (1240, 600)),
            (ImageDimensionSpec(50, 50, "StoreLogo"), 100, (50, 50)),
        ],
    )
    def test_scaled_size_truncates(self, dims, scale, expected):
        """Test that scaled sizes truncate toward zero."""
        assert dims.scaled_size(scale) == expected

    def test_base_name(self):
        """Test default and special tile base names."""
        assert ImageDimensionSpec(310, 150).base_name(APP_ID) == "MYAPP-310x150Logo"
        assert ImageDimensionSpec(50, 50, "StoreLogo").base_name(APP_ID) == "StoreLogo"

    def test_banner_threshold(self):
        """Test that only shapes larger than 300 are banners."""
        banners = {(d.width, d.height) for d in REQUIRED_DIMENSIONS if d.is_banner}
        assert banners == {(310, 150), (310, 310)}


class TestRenderers:
    """Tests for the individual tile renderers."""

    def test_contained_preserves_aspect(self):
        """Test that a wide icon is centered with transparent bands."""
        icon = Image.new("RGBA", (64, 32), (255, 0, 0, 255))

        tile = render_contained(icon, (100, 100))

        assert tile.size == (100, 100)
        assert tile.getpixel((50, 50)) == (255, 0, 0, 255)
        assert tile.getpixel((50, 0))[3] == 0

    def test_banner_covers_background(self):
        """Test that the wallpaper fills the tile and the icon sits centered."""
        icon = Image.new("RGBA", (64, 32), (255, 0, 0, 255))
        wallpaper = Image.new("RGBA", (200, 100), (0, 0, 255, 255))

        tile = render_banner(icon, wallpaper, (310, 310))

        assert tile.size == (310, 310)
        assert tile.getpixel((0, 0)) == (0, 0, 255, 255)
        assert tile.getpixel((155, 155)) == (255, 0, 0, 255)


class TestGenerateAssets:
    """Tests for generate_assets()."""

    def test_every_shape_and_scale_generated(self, tmp_path, build_config):
        """Test pixel dimensions of all 30 scaled tiles."""
        mapping = generate_assets(APP_ID, tmp_path, build_config)

        for dims in REQUIRED_DIMENSIONS:
            for scale in REQUIRED_SCALES:
                key = f"assets\\{dims.base_name(APP_ID)}.scale-{scale}.png"
                assert key in mapping
                with Image.open(mapping[key]) as image:
                    assert image.size == dims.scaled_size(scale)

    def test_mapping_entry_count(self, tmp_path, build_config):
        """Test 30 scaled tiles plus 18 unscaled aliases."""
        mapping = generate_assets(APP_ID, tmp_path, build_config)

        assert len(mapping) == 48
        assert all(path.exists() for path in mapping.values())
        assert len(list((tmp_path / "assets").iterdir())) == 48

    def test_unscaled_aliases_copy_100_percent_tile(self, tmp_path, build_config):
        """Test that the aliases are byte-identical to the 100% tile."""
        mapping = generate_assets(APP_ID, tmp_path, build_config)

        scaled = mapping["assets\\MYAPP-44x44Logo.scale-100.png"].read_bytes()
        for alias in (
            "assets\\MYAPP-44x44Logo.png",
            "assets\\MYAPP-44x44Logo.targetsize-44_altform-lightunplated.png",
            "assets\\MYAPP-44x44Logo.targetsize-44_altform-unplated.png",
        ):
            assert mapping[alias].read_bytes() == scaled

    def test_store_logo_name(self, tmp_path, build_config):
        """Test that the 50x50 tile is always named StoreLogo."""
        mapping = generate_assets(APP_ID, tmp_path, build_config)

        assert "assets\\StoreLogo.png" in mapping
        assert "assets\\StoreLogo.scale-400.png" in mapping
        assert not any("50x50" in key for key in mapping)

    def test_banner_used_with_wallpaper(self, tmp_path, build_config, wallpaper_png):
        """Test that the 310x310 tile is composited when a wallpaper is set."""
        config = replace(build_config, wallpaper_icon=wallpaper_png)

        mapping = generate_assets(APP_ID, tmp_path, config)

        tile = mapping["assets\\MYAPP-310x310Logo.scale-100.png"]
        assert _pixel(tile, (0, 0)) == (0, 0, 255, 255)
        assert _pixel(tile, (155, 155)) == (255, 0, 0, 255)

    def test_contain_used_without_wallpaper(self, tmp_path, build_config):
        """Test that the 310x310 tile is a plain contain-resize otherwise."""
        mapping = generate_assets(APP_ID, tmp_path, build_config)

        tile = mapping["assets\\MYAPP-310x310Logo.scale-100.png"]
        assert _pixel(tile, (0, 0))[3] == 0
        assert _pixel(tile, (155, 155)) == (255, 0, 0, 255)

    def test_small_tiles_never_use_wallpaper(self, tmp_path, build_config, wallpaper_png):
        """Test that tiles at or below the threshold ignore the wallpaper."""
        config = replace(build_config, wallpaper_icon=wallpaper_png)

        mapping = generate_assets(APP_ID, tmp_path, config)

        tile = mapping["assets\\MYAPP-150x150Logo.scale-100.png"]
        assert _pixel(tile, (0, 0))[3] == 0

    def test_worker_count_does_not_change_mapping(self, tmp_path, build_config):
        """Test that sequential and parallel generation give the same keys."""
        serial = generate_assets(
            APP_ID, tmp_path / "serial", replace(build_config, asset_workers=1)
        )
        parallel = generate_assets(
            APP_ID, tmp_path / "parallel", replace(build_config, asset_workers=8)
        )

        assert serial.keys() == parallel.keys()
