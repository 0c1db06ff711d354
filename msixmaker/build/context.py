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

"""Per-invocation build facts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class BuildContext:
    """Facts about one packaging run, supplied by the caller.

    Attributes:
        app_name: Application display name.
        version: Application version as released (any format).
        target_arch: Package architecture (x64, x86, arm64, ...).
        staged_dir: Directory holding the already-built application.
        output_dir: Base directory for scratch space and outputs.
    """

    app_name: str
    version: str
    target_arch: str
    staged_dir: Path
    output_dir: Path

    @property
    def scratch_dir(self) -> Path:
        """Package layout directory, unique per app/arch combination."""
        return self.output_dir / "msix" / "build" / f"{self.app_name}-{self.target_arch}"

    @property
    def package_out_dir(self) -> Path:
        """Directory the finished package and descriptors are written to."""
        return self.output_dir / f"{self.app_name}-{self.target_arch}-msix"
