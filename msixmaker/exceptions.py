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

"""Exception hierarchy for msixmaker.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Configuration-related errors (YAML parse, missing fields,
    descriptor requested without a download URL)
- NetworkError: Network/download-related errors (tool download failures)
- PackagingError: Packaging/build-related errors (no executable, failing
    external tools, publisher lookup failures)

All exceptions inherit from MSIXError, allowing users to catch all msixmaker
errors with a single except clause if needed. Filesystem failures during
staging or asset generation are not wrapped; they surface as the original
OSError.

Example:
    Catching specific error types:
        ```python
        from msixmaker.build import build_msix
        from msixmaker.exceptions import ToolInvocationFailure

        try:
            result = build_msix(config, context)
        except ToolInvocationFailure as e:
            print(f"{e.executable} exited with {e.exit_code}")
        ```
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "MSIXError",
    "ConfigError",
    "MissingBaseURLError",
    "NetworkError",
    "PackagingError",
    "ExecutableNotFoundError",
    "NoExecutableFoundError",
    "ToolInvocationFailure",
    "ToolTimeoutError",
    "PublisherResolutionFailure",
]


class MSIXError(Exception):
    """Base exception for all msixmaker errors."""

    pass


class ConfigError(MSIXError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parse errors (syntax errors, non-mapping documents)
    - Missing required configuration fields (e.g., no app_icon)
    - Invalid field types or unknown capability names
    """

    pass


class MissingBaseURLError(ConfigError):
    """Raised when an install descriptor is requested without a download URL.

    Raised before any file is written so a misconfigured build never leaves
    a partial scratch directory behind.
    """

    pass


class NetworkError(MSIXError):
    """Raised for network/download-related errors.

    This exception is raised when a helper tool (sigcheck.exe) has to be
    downloaded and the request fails.
    """

    pass


class PackagingError(MSIXError):
    """Raised for packaging/build-related errors.

    This exception is raised when there are problems with:

    - Missing build tools (makeappx.exe, makepri.exe not found)
    - External tool failures (non-zero exit codes, timeouts)
    - Publisher resolution from a signed executable
    - Missing inputs (no executable in the staged tree)
    """

    pass


class ExecutableNotFoundError(PackagingError):
    """Raised when a staged tree contains no runnable .exe file."""

    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(f"No executable file found in {root}")


NoExecutableFoundError = ExecutableNotFoundError


class ToolInvocationFailure(PackagingError):
    """Raised when an external tool exits with a non-zero code.

    Attributes:
        executable: The program that was run.
        exit_code: Its exit code, or None when it was killed by a timeout.
    """

    def __init__(
        self, executable: str, exit_code: int | None, message: str | None = None
    ) -> None:
        self.executable = executable
        self.exit_code = exit_code
        if message is None:
            message = f"Running {executable} returned: {exit_code}."
        super().__init__(message)


class ToolTimeoutError(ToolInvocationFailure):
    """Raised when an external tool exceeds the configured timeout."""

    def __init__(self, executable: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            executable, None, f"Running {executable} timed out after {timeout}s."
        )


class PublisherResolutionFailure(PackagingError):
    """Raised when no publisher can be read from a signed executable."""

    pass
