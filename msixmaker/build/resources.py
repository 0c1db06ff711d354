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

"""Resource index (resources.pri) generation with makepri.exe."""

from __future__ import annotations

from pathlib import Path

from msixmaker.tools import run_tool

PRI_FILENAME = "resources.pri"
PRI_CONFIG_FILENAME = "priconfig.xml"


def make_pri(layout_dir: Path, makepri: Path | str, timeout: float | None = None) -> Path:
    """Index the package layout into resources.pri.

    Runs "makepri createconfig" followed by "makepri new" against the
    layout directory, then removes the temporary priconfig.xml so it does
    not end up in the package.

    Args:
        layout_dir: Package layout root (must already contain the assets).
        makepri: Path to makepri.exe.
        timeout: Optional per-call timeout in seconds.

    Returns:
        Path to the generated resources.pri.

    Raises:
        ToolInvocationFailure: If makepri.exe fails.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    pri_path = layout_dir / PRI_FILENAME
    pri_config_path = layout_dir / PRI_CONFIG_FILENAME

    logger.verbose("BUILD", f"Indexing resources in {layout_dir}")

    run_tool(
        makepri,
        ["createconfig", "/cf", pri_config_path, "/dq", "en-US", "/pv", "10.0.0", "/o"],
        timeout=timeout,
    )
    run_tool(
        makepri,
        ["new", "/pr", layout_dir, "/cf", pri_config_path, "/of", pri_path, "/o"],
        timeout=timeout,
    )
    pri_config_path.unlink(missing_ok=True)

    logger.verbose("BUILD", f"[OK] Generated {pri_path.name}")

    return pri_path
