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

"""Code signing for msixmaker.

Signing is delegated to signtool.exe. This module only decides what to
sign: a single file (the finished package) or every signable binary in a
staged directory.

Certificate-based signing also yields a CredentialEnvironment: the
CSC_LINK / CSC_KEY_PASSWORD variables downstream installers (e.g.
electron-builder) read to sign their own output. The orchestrator applies
it once with apply_credential_environment(); existing values are never
overwritten.

Example:
    from pathlib import Path
    from msixmaker.build.signing import apply_credential_environment, codesign

    patch = codesign(config.codesign, Path("out/MyApp-x64.msix"), signtool)
    apply_credential_environment(patch)
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field
import os
from pathlib import Path

from msixmaker.build.mapping import walk_files
from msixmaker.config import CodesignOptions
from msixmaker.tools import run_tool

SIGNABLE_SUFFIXES = (".exe", ".dll", ".node")
CERTIFICATE_FILE_VAR = "CSC_LINK"
CERTIFICATE_PASSWORD_VAR = "CSC_KEY_PASSWORD"


@dataclass(frozen=True)
class CredentialEnvironment:
    """Environment variables to set for later signing steps."""

    variables: dict[str, str] = field(default_factory=dict)


def credential_environment(options: CodesignOptions | None) -> CredentialEnvironment:
    """Build the credential patch for a codesign configuration."""
    variables: dict[str, str] = {}
    if options is None:
        return CredentialEnvironment(variables)
    if options.certificate_file:
        variables[CERTIFICATE_FILE_VAR] = str(options.certificate_file)
    if options.certificate_password:
        variables[CERTIFICATE_PASSWORD_VAR] = options.certificate_password
    return CredentialEnvironment(variables)


def apply_credential_environment(
    patch: CredentialEnvironment,
    environ: MutableMapping[str, str] | None = None,
) -> list[str]:
    """Set each patched variable unless it is already present.

    Args:
        patch: Variables to set.
        environ: Target environment. Default is os.environ.

    Returns:
        Names of the variables that were set.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    if environ is None:
        environ = os.environ

    applied = []
    for name, value in patch.variables.items():
        if environ.get(name):
            continue
        environ[name] = value
        applied.append(name)
        logger.verbose("SIGN", f"Set {name} for downstream signing")
    return applied


def _signtool_args(options: CodesignOptions, files: list[Path]) -> list[str]:
    args = ["sign", "/fd", "SHA256"]
    if options.certificate_file:
        args += ["/f", str(options.certificate_file)]
        if options.certificate_password:
            args += ["/p", options.certificate_password]
    elif options.certificate_sha1:
        args += ["/sha1", options.certificate_sha1]
    else:
        args.append("/a")
    if options.timestamp_server:
        args += ["/tr", options.timestamp_server, "/td", "SHA256"]
    if options.description:
        args += ["/d", options.description]
    return args + [str(f) for f in files]


def signable_files(directory: Path) -> list[Path]:
    """Every binary beneath directory that signtool should sign."""
    return [
        path
        for path in walk_files(directory)
        if path.suffix.lower() in SIGNABLE_SUFFIXES
    ]


def codesign(
    options: CodesignOptions | None,
    target: Path,
    signtool: Path | str,
    timeout: float | None = None,
) -> CredentialEnvironment:
    """Sign a file, or every signable file in a directory.

    Args:
        options: Codesign configuration; None skips signing.
        target: File or directory to sign.
        signtool: Path to signtool.exe.
        timeout: Optional tool timeout in seconds.

    Returns:
        The credential environment patch for downstream signing (empty
        when signing is skipped).

    Raises:
        ToolInvocationFailure: If signtool.exe fails.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()

    if options is None:
        logger.verbose("SIGN", "Skipping code signing, set 'codesign' to enable it")
        return CredentialEnvironment()

    if target.is_dir():
        logger.verbose("SIGN", f"Signing directory {target}")
        files = signable_files(target)
        if not files:
            logger.verbose("SIGN", "No signable files found")
    else:
        logger.verbose("SIGN", f"Signing file {target}")
        files = [target]

    if files:
        run_tool(signtool, _signtool_args(options, files), timeout=timeout)
        logger.verbose("SIGN", f"[OK] Signed {len(files)} file(s)")

    return credential_environment(options)
