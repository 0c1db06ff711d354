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

"""Build output for msixmaker.

Library code never prints directly. It asks for the process-wide logger
with get_global_logger() and reports through four channels:

- step: pipeline progress ("[3/9] Generating tile assets..."), always shown
- warning: recoverable problems, always shown, written to stderr
- verbose: what each step did, shown with --verbose
- debug: every line the Windows SDK tools print, shown with --debug

Message prefixes name the subsystem: BUILD, ASSETS, MANIFEST, SIGN,
CHANNEL, CONFIG, TOOLS, and MSIX for external tool output.

Example:
    from msixmaker.logging import get_logger, set_global_logger

    set_global_logger(get_logger(verbose=True))

Note:
    The global logger is silent until the CLI (or a host program)
    installs one, so importing msixmaker as a library prints nothing.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """What the build pipeline needs from a logger."""

    def step(self, step: int, total: int, message: str) -> None: ...

    def warning(self, prefix: str, message: str) -> None: ...

    def verbose(self, prefix: str, message: str) -> None: ...

    def debug(self, prefix: str, message: str) -> None: ...


class DefaultLogger:
    """Console logger used by the CLI.

    Steps and verbose/debug lines go to stdout, warnings to stderr so they
    survive when stdout is redirected to a file.

    Args:
        verbose: Show verbose messages.
        debug: Show tool output and other debug messages (implies verbose).
        stream: Output stream for non-warning messages. Default is stdout.
    """

    def __init__(
        self, verbose: bool = False, debug: bool = False, stream: TextIO | None = None
    ) -> None:
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _out(self, text: str) -> None:
        print(text, file=self._stream or sys.stdout)

    def step(self, step: int, total: int, message: str) -> None:
        width = len(str(total))
        self._out(f"[{step:>{width}}/{total}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        print(f"[WARNING] [{prefix}] {message}", file=sys.stderr)

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            self._out(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            self._out(f"[{prefix}] {message}")


class SilentLogger:
    """Discards everything. The default global logger."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Console logger for the given verbosity."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Install the logger every msixmaker module reports to."""
    global _global_logger
    _global_logger = logger
