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

"""Public API return types for msixmaker.

This module defines dataclasses for return values from public API functions.
These types represent the results of operations like building a package,
running an external tool, and validating a configuration file.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from msixmaker.build import build_msix
        from msixmaker.results import ArtifactKind

        result = build_msix(config, context)
        for artifact in result.artifacts:
            if artifact.kind is ArtifactKind.PACKAGE:
                print(artifact.path)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like ManifestMetadata) remain co-located with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ArtifactKind(str, Enum):
    """Kinds of files a build can produce."""

    PACKAGE = "package"
    INSTALL_DESCRIPTOR = "install-descriptor"
    UPDATE_CHANNEL = "update-channel-file"


@dataclass(frozen=True)
class Artifact:
    """A produced output file.

    Attributes:
        path: Absolute path to the file.
        kind: What the file is.
    """

    path: Path
    kind: ArtifactKind


@dataclass(frozen=True)
class ToolInvocationResult:
    """Outcome of one external tool run.

    Attributes:
        executable: The program that was run.
        exit_code: Process exit code.
        stdout: Everything the process wrote to stdout, unmodified.
        stderr: Everything the process wrote to stderr, unmodified.
        log_records: Tagged lines ("stdout: ..." / "stderr: ...") in the
            order they were emitted per stream.
    """

    executable: str
    exit_code: int
    stdout: str
    stderr: str
    log_records: tuple[str, ...]


@dataclass(frozen=True)
class BuildResult:
    """Result from building an MSIX package.

    Attributes:
        app_id: Package identity name used in the manifest.
        app_name: Application display name.
        version: Normalized four-part package version.
        executable: Package-relative path of the primary executable.
        artifacts: Produced files, in order package, install descriptor,
            update channel. Skipped steps contribute nothing.
        status: Build status (typically "success").
    """

    app_id: str
    app_name: str
    version: str
    executable: str
    artifacts: tuple[Artifact, ...]
    status: str

    @property
    def artifact_paths(self) -> list[Path]:
        return [artifact.path for artifact in self.artifacts]


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a build configuration file.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        config_path: String path to the validated file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    config_path: str
