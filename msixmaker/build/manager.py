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

"""Build manager for MSIX package creation.

This module orchestrates the complete build process that turns a staged
application directory into a signed MSIX package, an optional install
descriptor and an optional update channel file.

Build Steps:
    1. Staging: copy the application into a fresh scratch directory
    2. Signing: sign every binary in the staged tree (when configured)
    3. Assets: map the staged tree and generate the tile images
    4. Metadata: derive the package identity and settings
    5. Manifest: write AppxManifest.xml, [Content_Types].xml and the
       install descriptor
    6. Resources: index resources.pri with makepri.exe
    7. Packaging: pack the layout with makeappx.exe
    8. Post-sign: sign the finished package (when configured)
    9. Update channel: write {channel}.yml (when an updater is configured)

Private Helpers:
    - _stage_application: Recreate the scratch directory and copy the app
    - _resolve_publisher: Publisher from config or from a signed binary
    - _signtool_path: signtool.exe from codesign or tools config
    - _pack: Run makeappx.exe pack

Design Principles:
    - Configuration errors are raised before anything is written
    - The scratch directory is per app/arch and recreated on every build
    - Steps run strictly in order; any failure aborts the build
    - Only artifacts that were actually produced are returned

Example:
    from pathlib import Path
    from msixmaker.build import BuildContext, build_msix
    from msixmaker.config import load_build_config

    config = load_build_config(Path("msix.yaml"))
    context = BuildContext(
        app_name="MyApp",
        version="1.2.0",
        target_arch="x64",
        staged_dir=Path("out/MyApp-win32-x64"),
        output_dir=Path("out/make"),
    )
    result = build_msix(config, context)
    for artifact in result.artifacts:
        print(artifact.kind.value, artifact.path)
"""

from __future__ import annotations

from pathlib import Path
import shutil

from msixmaker.build.assets import generate_assets
from msixmaker.build.context import BuildContext
from msixmaker.build.manifest import (
    CONTENT_TYPES_FILENAME,
    MANIFEST_FILENAME,
    check_appinstaller_settings,
    derive_app_id,
    derive_metadata,
    resolve_publisher,
    resolve_publisher_from_mapping,
    write_content_types,
    write_install_descriptor,
    write_package_manifest,
)
from msixmaker.build.mapping import (
    FileMapping,
    merge_mappings,
    package_path,
    scan,
    write_mapping_file,
)
from msixmaker.build.resources import make_pri
from msixmaker.build.signing import apply_credential_environment, codesign
from msixmaker.config import BuildConfig
from msixmaker.exceptions import PublisherResolutionFailure
from msixmaker.results import Artifact, ArtifactKind, BuildResult
from msixmaker.tools import get_sigcheck, resolve_tool, run_tool
from msixmaker.updates import write_app_update_yml, write_channel_file

TOTAL_STEPS = 9

# Parts makeappx generates itself; they must not appear in a /f mapping
RESERVED_PACKAGE_PARTS = frozenset(
    {
        CONTENT_TYPES_FILENAME,
        "AppxBlockMap.xml",
        "AppxSignature.p7x",
        package_path("AppxMetadata", "CodeIntegrity.cat"),
    }
)


def _stage_application(context: BuildContext, config: BuildConfig) -> Path:
    """Recreate the scratch directory and copy the staged app into it.

    Returns:
        The application directory inside the scratch directory.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    scratch_dir = context.scratch_dir

    if scratch_dir.exists():
        logger.verbose("BUILD", f"Removing previous scratch directory: {scratch_dir}")
        shutil.rmtree(scratch_dir)

    app_dir = scratch_dir / context.app_name
    scratch_dir.mkdir(parents=True)
    shutil.copytree(context.staged_dir, app_dir)
    logger.verbose("BUILD", f"Copied {context.staged_dir} -> {app_dir}")

    if config.updater is not None:
        update_yml = write_app_update_yml(app_dir, context.app_name, config.updater)
        logger.verbose("BUILD", f"Wrote {update_yml.relative_to(scratch_dir)}")

    return app_dir


def _signtool_path(config: BuildConfig) -> Path:
    configured = None
    if config.codesign is not None:
        configured = config.codesign.signtool_path
    return resolve_tool(configured or config.tools.signtool, "signtool.exe")


def _resolve_publisher(
    config: BuildConfig,
    context: BuildContext,
    executable: str,
    mapping: FileMapping,
) -> str | None:
    """Return None when the config sets a publisher, else read it with sigcheck."""
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    if config.publisher:
        return None

    sigcheck = get_sigcheck(
        config.tools.sigcheck, context.output_dir / "msix" / "tools"
    )
    try:
        return resolve_publisher(
            mapping[executable], sigcheck, timeout=config.tool_timeout
        )
    except PublisherResolutionFailure:
        logger.verbose(
            "MANIFEST", f"{executable} is not signed, trying other binaries"
        )
    # The primary executable was already checked above
    others = {key: path for key, path in mapping.items() if key != executable}
    return resolve_publisher_from_mapping(
        others, sigcheck, timeout=config.tool_timeout
    )


def _pack(
    config: BuildConfig,
    context: BuildContext,
    mapping_file: Path,
    out_msix: Path,
) -> None:
    makeappx = resolve_tool(config.tools.makeappx, "makeappx.exe")
    if config.pack_from_mapping:
        source = ["/f", str(mapping_file)]
    else:
        source = ["/d", str(context.scratch_dir)]
    run_tool(
        makeappx,
        ["pack", *source, "/p", str(out_msix), "/o"],
        timeout=config.tool_timeout,
    )


def build_msix(config: BuildConfig, context: BuildContext) -> BuildResult:
    """Build an MSIX package from a staged application directory.

    Args:
        config: Build configuration.
        context: Facts about this run (app name, version, architecture,
            staged and output directories).

    Returns:
        BuildResult listing the produced artifacts in order package,
        install descriptor, update channel.

    Raises:
        MissingBaseURLError: If an install descriptor is requested without
            a download URL (raised before any file is written).
        ExecutableNotFoundError: If the staged tree has no .exe.
        PublisherResolutionFailure: If no publisher is configured and none
            can be read from a signed binary.
        ToolInvocationFailure: If an external tool fails.
        OSError: If staging or asset generation fails on disk.

    Example:
        result = build_msix(config, context)
        print(result.artifact_paths[0])  # out/make/MyApp-x64-msix/MyApp-x64-1.2.0.msix
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()

    logger.step(1, TOTAL_STEPS, "Staging application files...")
    check_appinstaller_settings(config)
    _stage_application(context, config)
    scratch_dir = context.scratch_dir
    out_dir = context.package_out_dir.resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    logger.step(2, TOTAL_STEPS, "Signing application binaries...")
    if config.codesign is not None:
        signtool = _signtool_path(config)
        patch = codesign(
            config.codesign, scratch_dir / context.app_name, signtool, config.tool_timeout
        )
        apply_credential_environment(patch)
    else:
        logger.verbose("SIGN", "Skipping code signing, set 'codesign' to enable it")

    logger.step(3, TOTAL_STEPS, "Generating tile assets...")
    executable, app_mapping = scan(scratch_dir)
    app_id = config.internal_app_id or derive_app_id(context.app_name)
    asset_mapping = generate_assets(app_id, scratch_dir, config)
    mapping = merge_mappings(app_mapping, asset_mapping)

    logger.step(4, TOTAL_STEPS, "Deriving package metadata...")
    publisher = _resolve_publisher(config, context, executable, app_mapping)
    metadata = derive_metadata(config, context, executable, publisher=publisher)
    logger.verbose(
        "BUILD",
        f"Package {metadata.app_id} {metadata.version} ({metadata.architecture})",
    )
    logger.verbose("BUILD", f"Publisher: {metadata.publisher}")

    logger.step(5, TOTAL_STEPS, "Writing package manifest...")
    manifest_path = write_package_manifest(scratch_dir, metadata)
    write_content_types(scratch_dir)
    appinstaller_path = write_install_descriptor(out_dir, scratch_dir, metadata)
    generated: FileMapping = {MANIFEST_FILENAME: manifest_path}
    if appinstaller_path is not None:
        generated[metadata.appinstaller_filename] = (
            scratch_dir / metadata.appinstaller_filename
        )

    logger.step(6, TOTAL_STEPS, "Indexing resources...")
    makepri = resolve_tool(config.tools.makepri, "makepri.exe")
    pri_path = make_pri(scratch_dir, makepri, config.tool_timeout)
    generated[pri_path.name] = pri_path
    mapping = merge_mappings(mapping, generated)

    logger.step(7, TOTAL_STEPS, "Packing MSIX...")
    out_msix = out_dir / metadata.msix_filename
    if out_msix.exists():
        logger.warning("BUILD", f"Removing existing package: {out_msix}")
        out_msix.unlink()
    mapping_file = write_mapping_file(
        {key: path for key, path in mapping.items() if key not in RESERVED_PACKAGE_PARTS},
        scratch_dir.parent / f"{context.app_name}-{context.target_arch}.mapping.txt",
    )
    _pack(config, context, mapping_file, out_msix)
    logger.verbose("BUILD", f"[OK] Packed {out_msix}")

    logger.step(8, TOTAL_STEPS, "Signing package...")
    if config.codesign is not None:
        patch = codesign(
            config.codesign, out_msix, _signtool_path(config), config.tool_timeout
        )
        apply_credential_environment(patch)
    else:
        logger.verbose("SIGN", "Skipping package signing")

    artifacts = [Artifact(out_msix, ArtifactKind.PACKAGE)]
    if appinstaller_path is not None:
        artifacts.append(Artifact(appinstaller_path, ArtifactKind.INSTALL_DESCRIPTOR))

    logger.step(9, TOTAL_STEPS, "Writing update channel...")
    if config.updater is not None:
        channel_path = write_channel_file(
            out_dir,
            context.version,
            channel=config.updater.channel,
            installers=[out_msix],
        )
        artifacts.append(Artifact(channel_path, ArtifactKind.UPDATE_CHANNEL))
    else:
        logger.verbose("CHANNEL", "No updater configured, skipping channel file")

    logger.verbose("BUILD", f"[OK] Build complete: {out_dir}")

    return BuildResult(
        app_id=metadata.app_id,
        app_name=metadata.app_name,
        version=metadata.version,
        executable=executable,
        artifacts=tuple(artifacts),
        status="success",
    )


class MSIXPackager:
    """Packager capability: build(context) -> list of artifacts.

    Wraps build_msix() for hosts that only need the produced files.

    Example:
        packager = MSIXPackager(config)
        for artifact in packager.build(context):
            upload(artifact.path)
    """

    def __init__(self, config: BuildConfig) -> None:
        self.config = config

    def build(self, context: BuildContext) -> list[Artifact]:
        result = build_msix(self.config, context)
        return list(result.artifacts)
