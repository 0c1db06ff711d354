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

"""Command-line interface for msixmaker.

This module provides the main CLI entry point for the msixmaker tool,
offering commands for config validation, MSIX package building, and
update channel generation.

Commands:

    validate: Validate a build config without building
    build: Build an MSIX package from a staged application directory
    channel: Write the update channel file for a directory of installers

Example:
    Validate a build config:
        ```bash
        $ msixmaker validate msix.yaml
        ```

    Build an MSIX package:
        ```bash
        $ msixmaker build msix.yaml --app-name MyApp --app-version 1.2.0 \\
            --arch x64 --dir out/MyApp-win32-x64 --out-dir out/make
        ```

    Write latest.yml next to the installers:
        ```bash
        $ msixmaker channel out/make/MyApp-x64-msix --version 1.2.0
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, tool, or validation failure)

Note:
    Each command has its own handler function (cmd_<command>).
    Verbose mode shows full tracebacks on errors for debugging.
    Debug mode implies verbose mode and echoes every tool output line.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys

from msixmaker.build import BuildContext, build_msix
from msixmaker.config import load_build_config
from msixmaker.exceptions import MSIXError
from msixmaker.logging import get_logger, set_global_logger
from msixmaker.updates import write_channel_file
from msixmaker.validation import validate_config


def _print_error(err: BaseException, show_traceback: bool) -> None:
    print(f"Error: {err}")
    if show_traceback:
        import traceback

        traceback.print_exc()


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'msixmaker validate' command.

    Checks the build config for syntax errors, missing files and
    inconsistent settings without staging anything or running tools.

    Args:
        args: Parsed command-line arguments containing the config path and
            verbose flag.

    Returns:
        Exit code (0 for a valid config, 1 for invalid).
    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    config_path = Path(args.config).resolve()

    print(f"Validating config: {config_path}")
    print()

    result = validate_config(config_path)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Config:      {result.config_path}")
    print(f"Status:      {result.status.upper()}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Config is valid!")
        return 0

    print()
    print(f"[FAILED] Config validation failed with {len(result.errors)} error(s).")
    return 1


def cmd_build(args: argparse.Namespace) -> int:
    """Handler for 'msixmaker build' command.

    Loads the build config and runs the full pipeline: staging, signing,
    tile assets, manifests, resource index, makeappx pack, package signing
    and, when an updater is configured, the update channel file.

    Args:
        args: Parsed command-line arguments containing the config path,
            app name, version, architecture, staged and output directories.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    config_path = Path(args.config).resolve()
    staged_dir = Path(args.dir).resolve()
    output_dir = Path(args.out_dir).resolve()

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}")
        return 1

    if not staged_dir.is_dir():
        print(f"Error: Staged application directory not found: {staged_dir}")
        return 1

    print(f"Building MSIX package for {args.app_name} {args.app_version} ({args.arch})")
    print(f"Staged directory: {staged_dir}")
    print(f"Output directory: {output_dir}")
    print()

    context = BuildContext(
        app_name=args.app_name,
        version=args.app_version,
        target_arch=args.arch,
        staged_dir=staged_dir,
        output_dir=output_dir,
    )

    try:
        config = load_build_config(config_path)
        result = build_msix(config, context)
    except (MSIXError, OSError) as err:
        _print_error(err, args.verbose or args.debug)
        return 1

    print("=" * 70)
    print("BUILD RESULTS")
    print("=" * 70)
    print(f"App Name:        {result.app_name}")
    print(f"App ID:          {result.app_id}")
    print(f"Version:         {result.version}")
    print(f"Executable:      {result.executable}")
    for artifact in result.artifacts:
        print(f"Artifact:        {artifact.path} ({artifact.kind.value})")
    print(f"Status:          {result.status}")
    print("=" * 70)
    print()
    print("[SUCCESS] MSIX package built successfully!")

    return 0


def cmd_channel(args: argparse.Namespace) -> int:
    """Handler for 'msixmaker channel' command.

    Hashes the installers in a directory and writes the update channel YAML
    (latest.yml by default) for generic auto-update clients.

    Args:
        args: Parsed command-line arguments containing the installer
            directory, version, optional release date, platform and output.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    installer_dir = Path(args.installer_dir).resolve()
    output = Path(args.output).resolve() if args.output else None

    if not installer_dir.is_dir():
        print(f"Error: Installer directory not found: {installer_dir}")
        return 1

    try:
        channel_path = write_channel_file(
            installer_dir,
            args.version,
            output,
            channel=args.channel,
            release_date=args.release_date,
            platform=args.platform,
        )
    except MSIXError as err:
        _print_error(err, args.verbose)
        return 1

    print("=" * 70)
    print("CHANNEL RESULTS")
    print("=" * 70)
    print(f"Installers:      {installer_dir}")
    print(f"Version:         {args.version}")
    print(f"Channel File:    {channel_path}")
    print("=" * 70)
    print()
    print("[SUCCESS] Update channel written successfully!")

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with every subcommand registered."""
    parser = argparse.ArgumentParser(
        prog="msixmaker",
        description="msixmaker - Build MSIX packages from staged Windows applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"msixmaker {version('msixmaker')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate build config (no building)",
        description="Check a build config for syntax errors, missing files and inconsistent settings.",
    )
    parser_validate.add_argument(
        "config",
        help="Path to the build config YAML file",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'build' command
    parser_build = subparsers.add_parser(
        "build",
        help="Build MSIX package from a staged application",
        description="Stage, sign, describe and pack an application directory into an MSIX package.",
    )
    parser_build.add_argument(
        "config",
        help="Path to the build config YAML file",
    )
    parser_build.add_argument(
        "--app-name",
        required=True,
        help="Application name (used for file names and the display name)",
    )
    parser_build.add_argument(
        "--app-version",
        required=True,
        help="Application version (normalized to four numeric parts in the manifest)",
    )
    parser_build.add_argument(
        "--arch",
        default="x64",
        help="Target architecture (default: x64)",
    )
    parser_build.add_argument(
        "--dir",
        required=True,
        help="Staged application directory to package",
    )
    parser_build.add_argument(
        "--out-dir",
        default="./out",
        help="Base directory for scratch space and output (default: ./out)",
    )
    parser_build.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_build.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_build.set_defaults(func=cmd_build)

    # 'channel' command
    parser_channel = subparsers.add_parser(
        "channel",
        help="Write update channel file for a directory of installers",
        description="Hash the installers in a directory and write the channel YAML for auto-update clients.",
    )
    parser_channel.add_argument(
        "installer_dir",
        help="Directory containing only the release installers",
    )
    parser_channel.add_argument(
        "--version",
        required=True,
        help="Release version",
    )
    parser_channel.add_argument(
        "--release-date",
        default=None,
        help="ISO-8601 release timestamp (default: now)",
    )
    parser_channel.add_argument(
        "--platform",
        choices=["win32", "darwin"],
        default="win32",
        help="Installer platform (default: win32)",
    )
    parser_channel.add_argument(
        "--channel",
        default="latest",
        help="Channel name; the file is written as {channel}.yml (default: latest)",
    )
    parser_channel.add_argument(
        "--output",
        default=None,
        help="Output file (default: {installer_dir}/{channel}.yml)",
    )
    parser_channel.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_channel.set_defaults(func=cmd_channel)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the msixmaker CLI.

    This function is registered as the 'msixmaker' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
