# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tile asset generation for msixmaker.

MSIX packages must ship six logo shapes at five display scales. This module
renders all 30 tiles from the configured app icon and writes the unscaled
aliases the package format needs for the 100% scale.

Generated Files (per shape, under {staging}/assets/):
    - {name}.scale-{100,125,150,200,400}.png
    - {name}.png                                        (100% copy)
    - {name}.targetsize-{w}_altform-lightunplated.png   (100% copy)
    - {name}.targetsize-{w}_altform-unplated.png        (100% copy)

{name} is "{appID}-{w}x{h}Logo", except for the 50x50 store logo which is
always "StoreLogo".

Composition:
    - Tiles wider or taller than 300 logical pixels use the wallpaper icon
      (when configured) covered to the tile size, with the app icon fitted
      into 85% of the tile and centered on top
    - Every other tile is the app icon fitted inside the tile size, padded
      with transparency

Example:
    from pathlib import Path
    from msixmaker.build.assets import generate_assets

    mapping = generate_assets("MYAPP", Path("out/msix/build/MyApp-x64"), config)
    print(len(mapping))  # 48
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
import shutil

from PIL import Image, ImageOps

from msixmaker.build.mapping import FileMapping, package_path
from msixmaker.config import BuildConfig

ASSETS_DIR_NAME = "assets"
BANNER_THRESHOLD = 300
OVERLAY_RATIO = 0.85
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class ImageDimensionSpec:
    """A required tile shape in logical pixels."""

    width: int
    height: int
    special_name: str | None = None

    def base_name(self, app_id: str) -> str:
        return self.special_name or f"{app_id}-{self.width}x{self.height}Logo"

    def scaled_size(self, scale: int) -> tuple[int, int]:
        """Pixel size at a scale percentage, truncated toward zero."""
        return int(self.width * scale / 100), int(self.height * scale / 100)

    @property
    def is_banner(self) -> bool:
        return max(self.width, self.height) > BANNER_THRESHOLD


REQUIRED_DIMENSIONS: tuple[ImageDimensionSpec, ...] = (
    ImageDimensionSpec(150, 150),
    ImageDimensionSpec(44, 44),
    ImageDimensionSpec(310, 150),
    ImageDimensionSpec(310, 310),
    ImageDimensionSpec(71, 71),
    ImageDimensionSpec(50, 50, "StoreLogo"),
)

REQUIRED_SCALES: tuple[int, ...] = (100, 125, 150, 200, 400)


def unscaled_aliases(base_name: str, width: int) -> tuple[str, ...]:
    """File names the 100% tile is copied to."""
    return (
        f"{base_name}.png",
        f"{base_name}.targetsize-{width}_altform-lightunplated.png",
        f"{base_name}.targetsize-{width}_altform-unplated.png",
    )


def _load_rgba(path: Path) -> Image.Image:
    with Image.open(path) as image:
        return image.convert("RGBA")


def render_contained(icon: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Fit icon inside size, preserving aspect, padded transparently."""
    return ImageOps.pad(icon, size, color=TRANSPARENT)


def render_banner(
    icon: Image.Image, wallpaper: Image.Image, size: tuple[int, int]
) -> Image.Image:
    """Cover size with the wallpaper and center the icon at 85% on top."""
    background = ImageOps.fit(wallpaper, size)
    overlay_size = (int(size[0] * OVERLAY_RATIO), int(size[1] * OVERLAY_RATIO))
    overlay = ImageOps.pad(icon, overlay_size, color=TRANSPARENT)
    offset = ((size[0] - overlay.width) // 2, (size[1] - overlay.height) // 2)
    background.alpha_composite(overlay, dest=offset)
    return background


def _generate_tile(
    app_id: str,
    assets_dir: Path,
    dimensions: ImageDimensionSpec,
    scale: int,
    icon: Image.Image,
    wallpaper: Image.Image | None,
) -> FileMapping:
    """Render one tile and, at 100%, its unscaled aliases."""
    mapping: FileMapping = {}
    base_name = dimensions.base_name(app_id)
    size = dimensions.scaled_size(scale)

    if dimensions.is_banner and wallpaper is not None:
        tile = render_banner(icon, wallpaper, size)
    else:
        tile = render_contained(icon, size)

    scaled_name = f"{base_name}.scale-{scale}.png"
    scaled_path = assets_dir / scaled_name
    tile.save(scaled_path, "PNG")
    mapping[package_path(ASSETS_DIR_NAME, scaled_name)] = scaled_path

    if scale == 100:
        for alias in unscaled_aliases(base_name, dimensions.width):
            alias_path = assets_dir / alias
            shutil.copyfile(scaled_path, alias_path)
            mapping[package_path(ASSETS_DIR_NAME, alias)] = alias_path

    return mapping


def generate_assets(app_id: str, staging_dir: Path, config: BuildConfig) -> FileMapping:
    """Generate every required tile asset into staging_dir/assets.

    Args:
        app_id: Package identity name used in tile file names.
        staging_dir: Package layout root.
        config: Build configuration (app_icon, wallpaper_icon,
            asset_workers).

    Returns:
        FileMapping with 30 scaled tiles and 18 unscaled aliases.

    Raises:
        OSError: If an icon cannot be read or a tile cannot be written.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    assets_dir = staging_dir / ASSETS_DIR_NAME
    assets_dir.mkdir(parents=True, exist_ok=True)

    icon = _load_rgba(config.app_icon)
    wallpaper = _load_rgba(config.wallpaper_icon) if config.wallpaper_icon else None

    logger.verbose("ASSETS", f"Generating tiles from {config.app_icon}")
    if wallpaper is not None:
        logger.verbose("ASSETS", f"Banner background: {config.wallpaper_icon}")

    units = [
        (dimensions, scale)
        for scale in REQUIRED_SCALES
        for dimensions in REQUIRED_DIMENSIONS
    ]

    mapping: FileMapping = {}
    with ThreadPoolExecutor(max_workers=config.asset_workers) as pool:
        futures = [
            pool.submit(
                _generate_tile, app_id, assets_dir, dimensions, scale, icon, wallpaper
            )
            for dimensions, scale in units
        ]
        for future in futures:
            mapping.update(future.result())

    logger.verbose("ASSETS", f"[OK] Generated {len(mapping)} asset file(s)")

    return mapping
