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

"""External tool execution for msixmaker.

This module runs the native packaging tools (makeappx.exe, makepri.exe,
signtool.exe, sigcheck.exe) and mirrors their output to the logger.

Design Principles:
    - No stdin: the child gets an immediately closed input stream
    - stdout and stderr are drained on independent threads, so a chatty
      stderr can never block stdout (or the other way round)
    - Every complete line is logged as soon as it arrives, under the
      fixed "MSIX" prefix; a trailing partial line is logged at exit
    - A non-zero exit is a ToolInvocationFailure unless the caller marks
      it tolerable, in which case it is logged as a warning
    - Aborting the wait (timeout, KeyboardInterrupt) kills the child

Example:
    Run a tool and read its output:
        ```python
        from msixmaker.tools import invoke_tool

        stdout = invoke_tool("sigcheck.exe", ["-accepteula", "app.exe"],
                             allow_nonzero_exit=True)
        ```
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import subprocess
import threading
from typing import IO

from msixmaker.exceptions import PackagingError, ToolInvocationFailure, ToolTimeoutError
from msixmaker.logging import Logger, get_global_logger
from msixmaker.results import ToolInvocationResult

TOOL_LOG_PREFIX = "MSIX"


class _LineCollector:
    """Collects output from one stream and emits tagged log records."""

    def __init__(
        self,
        name: str,
        records: list[str],
        lock: threading.Lock,
        logger: Logger,
    ) -> None:
        self.name = name
        self.chunks: list[str] = []
        self._records = records
        self._lock = lock
        self._logger = logger

    def pump(self, stream: IO[bytes]) -> None:
        # readline() returns a partial line at EOF, which flushes the tail
        for raw in iter(stream.readline, b""):
            text = raw.decode("utf-8", errors="replace")
            self.chunks.append(text)
            record = f"{self.name}: {text.rstrip()}"
            with self._lock:
                self._records.append(record)
            self._logger.debug(TOOL_LOG_PREFIX, record)
        stream.close()

    @property
    def text(self) -> str:
        return "".join(self.chunks)


def run_tool(
    executable: str | Path,
    args: Sequence[str | Path],
    allow_nonzero_exit: bool = False,
    timeout: float | None = None,
) -> ToolInvocationResult:
    """Run an external tool to completion and capture its output.

    Args:
        executable: Program to run.
        args: Command-line arguments.
        allow_nonzero_exit: If True, a non-zero exit code is logged as a
            warning instead of raising. Default is False.
        timeout: Seconds to wait before killing the process. Default is no
            timeout.

    Returns:
        ToolInvocationResult with the exit code and captured streams.

    Raises:
        PackagingError: If the executable cannot be started.
        ToolInvocationFailure: If the exit code is non-zero and not allowed.
        ToolTimeoutError: If the timeout elapses.
    """
    logger = get_global_logger()
    executable = str(executable)
    cmd = [executable] + [str(arg) for arg in args]

    logger.verbose(TOOL_LOG_PREFIX, f"Running {cmd}")

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as err:
        raise PackagingError(f"Could not start {executable}: {err}") from err

    records: list[str] = []
    lock = threading.Lock()
    stdout = _LineCollector("stdout", records, lock, logger)
    stderr = _LineCollector("stderr", records, lock, logger)
    readers = [
        threading.Thread(target=stdout.pump, args=(proc.stdout,), daemon=True),
        threading.Thread(target=stderr.pump, args=(proc.stderr,), daemon=True),
    ]
    for reader in readers:
        reader.start()

    try:
        exit_code = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired as err:
        proc.kill()
        proc.wait()
        for reader in readers:
            reader.join()
        raise ToolTimeoutError(executable, err.timeout) from err
    except BaseException:
        proc.kill()
        raise

    for reader in readers:
        reader.join()

    if exit_code != 0:
        if allow_nonzero_exit:
            logger.warning(TOOL_LOG_PREFIX, f"{executable} returned: {exit_code}")
        else:
            raise ToolInvocationFailure(executable, exit_code)

    return ToolInvocationResult(
        executable=executable,
        exit_code=exit_code,
        stdout=stdout.text,
        stderr=stderr.text,
        log_records=tuple(records),
    )


def invoke_tool(
    executable: str | Path,
    args: Sequence[str | Path],
    allow_nonzero_exit: bool = False,
    timeout: float | None = None,
) -> str:
    """Run an external tool and return its stdout.

    See run_tool() for arguments and raised exceptions.
    """
    return run_tool(
        executable, args, allow_nonzero_exit=allow_nonzero_exit, timeout=timeout
    ).stdout
