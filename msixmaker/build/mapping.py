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

"""Package file mapping for msixmaker.

A FileMapping maps package-relative paths (backslash separated, as the
package format expects) to files on disk. This module builds mappings from
a staged tree, unites mappings from several producers, and writes the
"[Files]" mapping text consumed by makeappx.exe.

Design Principles:
    - Traversal is depth-first with directory entries sorted by name, so
      the same snapshot always yields the same order and the same
      primary executable
    - The primary executable is the shallowest .exe; among equally deep
      candidates the first one in traversal order wins
    - Mapping keys are unique; a later entry for the same key replaces the
      earlier one and the collision is logged

Example:
    from pathlib import Path
    from msixmaker.build.mapping import scan, write_mapping_file

    executable, mapping = scan(Path("out/msix/build/MyApp-x64"))
    write_mapping_file(mapping, Path("out/msix/MyApp-x64.mapping.txt"))
"""

from __future__ import annotations

from collections.abc import Iterator
import os
from pathlib import Path

from msixmaker.exceptions import ExecutableNotFoundError

PACKAGE_PATH_SEPARATOR = "\\"
EXECUTABLE_SUFFIX = ".exe"

FileMapping = dict[str, Path]


def package_path(*parts: str) -> str:
    """Join path components with the package format separator."""
    return PACKAGE_PATH_SEPARATOR.join(parts)


def walk_files(root: Path) -> Iterator[Path]:
    """Yield every regular file below root, depth-first, sorted by name."""
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from walk_files(Path(entry.path))
        elif entry.is_file():
            yield Path(entry.path)


def scan(root: Path) -> tuple[str, FileMapping]:
    """Map every file below root and locate the primary executable.

    Args:
        root: Directory to traverse.

    Returns:
        A tuple (executable, mapping), where executable is the
        package-relative path of the shallowest .exe and mapping covers
        every regular file.

    Raises:
        ExecutableNotFoundError: If the tree contains no .exe file.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    mapping: FileMapping = {}
    executable: str | None = None
    executable_depth = 0

    for file_path in walk_files(root):
        parts = file_path.relative_to(root).parts
        key = package_path(*parts)
        mapping[key] = file_path

        if file_path.name.lower().endswith(EXECUTABLE_SUFFIX) and (
            executable is None or len(parts) < executable_depth
        ):
            executable = key
            executable_depth = len(parts)

    if executable is None:
        raise ExecutableNotFoundError(root)

    logger.verbose("BUILD", f"Primary executable: {executable}")
    logger.debug("BUILD", f"Mapped {len(mapping)} file(s) under {root}")

    return executable, mapping


def merge_mappings(base: FileMapping, overlay: FileMapping) -> FileMapping:
    """Unite two mappings; overlay entries replace base entries.

    Returns a new mapping. Every replaced key is logged as a warning.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    merged: FileMapping = dict(base)
    for key, disk_path in overlay.items():
        previous = merged.get(key)
        if previous is not None and previous != disk_path:
            logger.warning("BUILD", f"{key} is mapped twice; using {disk_path}")
        merged[key] = disk_path
    return merged


def render_mapping_file(mapping: FileMapping) -> str:
    """Render the makeappx "[Files]" mapping text with CRLF line endings."""
    lines = ["[Files]"]
    for key in sorted(mapping):
        lines.append(f'"{mapping[key]}" "{key}"')
    return "\r\n".join(lines) + "\r\n"


def write_mapping_file(mapping: FileMapping, path: Path) -> Path:
    """Write the mapping text to path and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(render_mapping_file(mapping))
    return path
