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

"""Native tool discovery for msixmaker.

Finds makeappx.exe, makepri.exe and signtool.exe inside the Windows 10 SDK
and obtains sigcheck.exe from PATH or the Sysinternals live share.

Design Principles:
    - A configured path always wins over discovery
    - SDK search prefers x64 builds, then the highest SDK version
    - sigcheck.exe is cached globally (not per-build) once downloaded
"""

from __future__ import annotations

from pathlib import Path
import shutil

import requests

from msixmaker.exceptions import NetworkError, PackagingError

WINDOWS_KITS_ROOT = Path("C:/Program Files (x86)/Windows Kits/10")

SIGCHECK_URL = "https://live.sysinternals.com/sigcheck.exe"


def find_in_windows_kits(exe_name: str, search_root: Path = WINDOWS_KITS_ROOT) -> Path:
    """Find a tool inside the Windows SDK.

    Args:
        exe_name: File name to look for, matched case-insensitively.
        search_root: SDK root directory.

    Returns:
        Path of the preferred match.

    Raises:
        PackagingError: If the tool is not installed.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    wanted = exe_name.lower()

    found: list[Path] = []
    preferred: list[Path] = []
    if search_root.is_dir():
        for candidate in search_root.rglob("*"):
            if candidate.name.lower() == wanted and candidate.is_file():
                found.append(candidate)
                if "x64" in str(candidate).lower():
                    preferred.append(candidate)

    candidates = preferred or found
    if not candidates:
        raise PackagingError(
            f"Could not find {exe_name} on this development machine. "
            f"Is the Windows 10 SDK installed?"
        )

    tool_path = sorted(candidates, key=str)[-1]
    logger.verbose("TOOLS", f"Found {exe_name}: {tool_path}")
    return tool_path


def resolve_tool(
    configured: Path | None,
    exe_name: str,
    search_root: Path = WINDOWS_KITS_ROOT,
) -> Path:
    """Return the configured tool path or search the SDK for it."""
    if configured is not None:
        return configured
    return find_in_windows_kits(exe_name, search_root)


def get_sigcheck(configured: Path | None, cache_dir: Path) -> Path:
    """Locate sigcheck.exe, downloading and caching it if necessary.

    Args:
        configured: Explicit path from the build config.
        cache_dir: Directory to cache a downloaded copy.

    Returns:
        Path to sigcheck.exe.

    Raises:
        NetworkError: If the download fails.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()

    if configured is not None:
        return configured

    on_path = shutil.which("sigcheck.exe") or shutil.which("sigcheck")
    if on_path:
        logger.verbose("TOOLS", f"Using sigcheck from PATH: {on_path}")
        return Path(on_path)

    tool_path = cache_dir / "sigcheck.exe"
    if tool_path.exists():
        logger.verbose("TOOLS", f"Using cached sigcheck: {tool_path}")
        return tool_path

    logger.verbose("TOOLS", "Downloading sigcheck.exe...")

    try:
        response = requests.get(SIGCHECK_URL, timeout=60)
        response.raise_for_status()
    except requests.RequestException as err:
        raise NetworkError(f"Failed to download sigcheck.exe: {err}") from err

    cache_dir.mkdir(parents=True, exist_ok=True)
    tool_path.write_bytes(response.content)

    logger.verbose("TOOLS", f"[OK] sigcheck.exe cached: {tool_path}")

    return tool_path
