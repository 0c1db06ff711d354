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

"""Update channel files for generic auto-update clients.

Two YAML documents are produced here:

- The channel file ({channel}.yml, e.g. latest.yml) published next to the
  installers. It lists every installer with its base64 SHA-512 digest and
  size so the client can verify what it downloads.
- app-update.yml, shipped inside the package under resources/, which tells
  the client where the channel file lives.

Installer Matching:
    - win32: the first .exe and the first .msix in the directory listing
      (at least one of them must exist)
    - darwin: the first .zip and the first .dmg (both required)

Example:
    from pathlib import Path
    from msixmaker.updates import compute_channel

    text = compute_channel(Path("out/MyApp-x64-msix"), "1.2.0")
    print(text)
"""

from __future__ import annotations

import base64
from datetime import datetime, timezone
import hashlib
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml

from msixmaker.exceptions import ConfigError, PackagingError

APP_UPDATE_FILENAME = "app-update.yml"
DEFAULT_CHANNEL = "latest"
DEFAULT_PLATFORM = "win32"
HASH_CHUNK_SIZE = 64 * 1024

# Suffixes per platform, and whether every suffix must be present
_PLATFORM_INSTALLERS: dict[str, tuple[tuple[str, ...], bool]] = {
    "win32": ((".exe", ".msix"), False),
    "darwin": ((".zip", ".dmg"), True),
}


def file_sha512(path: Path) -> str:
    """Base64 SHA-512 digest of a file, read sequentially in chunks."""
    digest = hashlib.sha512()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return base64.b64encode(digest.digest()).decode("ascii")


def _first_with_suffix(names: list[str], suffix: str) -> str | None:
    for name in names:
        if name.lower().endswith(suffix):
            return name
    return None


def find_installers(installer_dir: Path, platform: str = DEFAULT_PLATFORM) -> list[Path]:
    """Pick the installer files for a platform from installer_dir.

    Raises:
        ConfigError: If the platform is not supported.
        PackagingError: If no (or, for darwin, not every) installer is found.
    """
    if platform not in _PLATFORM_INSTALLERS:
        raise ConfigError(f"Unsupported platform: {platform}")

    suffixes, require_all = _PLATFORM_INSTALLERS[platform]
    names = sorted(entry.name for entry in installer_dir.iterdir() if entry.is_file())

    found = []
    for suffix in suffixes:
        name = _first_with_suffix(names, suffix)
        if name is None:
            if require_all:
                raise PackagingError(f"Could not find {suffix} file in {installer_dir}")
            continue
        found.append(installer_dir / name)

    if not found:
        raise PackagingError(
            f"Could not find {' or '.join(suffixes)} file in {installer_dir}"
        )
    return found


def _release_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def compute_channel(
    installer_dir: Path,
    version: str,
    release_date: str | None = None,
    platform: str = DEFAULT_PLATFORM,
    installers: Sequence[Path] | None = None,
) -> str:
    """Render the channel YAML for the installers in installer_dir.

    Args:
        installer_dir: Directory holding only the release installers.
        version: Release version.
        release_date: ISO-8601 timestamp; defaults to now (UTC).
        platform: "win32" or "darwin".
        installers: Exact files to list, in order. When omitted they are
            picked from installer_dir by platform.

    Returns:
        The channel file contents.

    Raises:
        ConfigError: If the platform is not supported.
        PackagingError: If no installer is found.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()

    files: list[dict[str, Any]] = []
    if installers is None:
        installers = find_installers(installer_dir, platform)
    elif not installers:
        raise PackagingError(f"No installers given for {installer_dir}")

    for path in installers:
        entry = {
            "url": path.name,
            "sha512": file_sha512(path),
            "size": path.stat().st_size,
        }
        logger.verbose("CHANNEL", f"{path.name}: {entry['size']} bytes")
        files.append(entry)

    document = {
        "version": version,
        "files": files,
        "path": files[0]["url"],
        "sha512": files[0]["sha512"],
        "releaseDate": release_date or _release_timestamp(),
    }
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


def write_channel_file(
    installer_dir: Path,
    version: str,
    output: Path | None = None,
    *,
    channel: str = DEFAULT_CHANNEL,
    release_date: str | None = None,
    platform: str = DEFAULT_PLATFORM,
    installers: Sequence[Path] | None = None,
) -> Path:
    """Compute the channel file and write it.

    The default output is {installer_dir}/{channel}.yml.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    text = compute_channel(installer_dir, version, release_date, platform, installers)
    if output is None:
        output = installer_dir / f"{channel}.yml"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")

    logger.verbose("CHANNEL", f"[OK] Update channel: {output}")
    return output


def get_app_update_yml(
    name: str,
    url: str,
    channel: str | None = None,
    updater_cache_dir_name: str | None = None,
    publisher_name: str | None = None,
) -> str:
    """Render app-update.yml for the generic update provider.

    Example:
        >>> print(get_app_update_yml("MyApp", "https://example.com/dl"), end="")
        provider: generic
        url: https://example.com/dl
        channel: latest
        updaterCacheDirName: myapp-updater
    """
    document: dict[str, Any] = {
        "provider": "generic",
        "url": url,
        "channel": channel or DEFAULT_CHANNEL,
        "updaterCacheDirName": updater_cache_dir_name or f"{name.lower()}-updater",
    }
    if publisher_name:
        document["publisherName"] = [publisher_name]
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


def write_app_update_yml(app_dir: Path, name: str, updater: Any) -> Path:
    """Write resources/app-update.yml inside a staged app directory.

    Args:
        app_dir: Staged application root.
        name: Application name.
        updater: UpdaterOptions from the build configuration.
    """
    path = app_dir / "resources" / APP_UPDATE_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        get_app_update_yml(
            name,
            updater.url,
            updater.channel,
            updater.updater_cache_dir_name,
            updater.publisher_name,
        ),
        encoding="utf-8",
    )
    return path
