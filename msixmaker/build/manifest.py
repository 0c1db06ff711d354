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

"""Package manifest generation for msixmaker.

This module derives the immutable ManifestMetadata for a build and renders
the three XML documents that go with an MSIX package:

- AppxManifest.xml: package identity, properties, capabilities, the
  application entry and its extensions
- [Content_Types].xml: extension to MIME type table plus the fixed
  package part overrides
- {app}-{arch}.appinstaller: the install descriptor that lets Windows find
  updates at the configured download URL

Private Helpers:
    - _render_startup_extension: windows.startupTask extension
    - _render_alias_extension: windows.appExecutionAlias extension
    - _render_protocol_extensions: one windows.protocol per scheme
    - _render_uri_handler_extensions: one windows.appUriHandler per host
    - _render_copilot_key_extension: Copilot hardware key provider
    - _render_auto_update: uap13:AutoUpdate property
    - _render_capabilities: extra capability elements

Design Principles:
    - Metadata is derived once; every renderer reads the same snapshot
    - Renderers are pure string templating, no file I/O
    - Every caller-controlled value goes through xml_safe_string()
    - A missing download URL turns the install descriptor off; it is only
      an error when descriptor generation was explicitly requested

Example:
    from msixmaker.build.manifest import derive_metadata, render_package_manifest

    metadata = derive_metadata(config, context, "MyApp\\\\MyApp.exe")
    xml = render_package_manifest(metadata)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
import re

import requests

from msixmaker.build.context import BuildContext
from msixmaker.build.mapping import FileMapping
from msixmaker.config import BuildConfig, CopilotKeyAction, CopilotKeyConfig, ProtocolSpec
from msixmaker.exceptions import MissingBaseURLError, PublisherResolutionFailure
from msixmaker.tools import invoke_tool

MANIFEST_FILENAME = "AppxManifest.xml"
CONTENT_TYPES_FILENAME = "[Content_Types].xml"
DISTINGUISHED_NAME_PREFIX = "CN="
APP_ID_MAX_LENGTH = 10

DEFAULT_MIN_VERSION = "10.0.17763.0"
DEFAULT_MAX_VERSION_TESTED = "10.0.21300.0"
COPILOT_MIN_VERSION = "10.0.19041.0"
COPILOT_MAX_VERSION_TESTED = "10.0.22621.0"

_ENTITY_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)

_PUBLISHER_RE = re.compile(r"\r?\n[ \t]+Publisher:[ \t]+(?P<publisher>.+?)\r?\n")

# Signed files worth asking sigcheck about, in order of preference
_SIGNED_SUFFIXES = (".exe", ".dll")

_CAPABILITY_ELEMENTS = {
    "GraphicsCapture": '<uap6:Capability Name="{name}" />',
    "Microphone": '<DeviceCapability Name="{name}" />',
    "Webcam": '<DeviceCapability Name="{name}" />',
}

_CAPABILITY_NAMES = {
    "GraphicsCapture": "graphicsCapture",
    "Microphone": "microphone",
    "Webcam": "webcam",
}

CONTENT_TYPE_DEFAULTS: tuple[tuple[str, str], ...] = (
    ("mp3", "audio/mpeg"),
    ("png", "image/png"),
    ("ico", "image/vnd.microsoft.icon"),
    ("dll", "application/x-msdownload"),
    ("pak", "application/octet-stream"),
    ("bin", "application/octet-stream"),
    ("dat", "application/octet-stream"),
    ("html", "text/html"),
    ("json", "application/json"),
    ("xml", "text/xml"),
    ("asar", "application/octet-stream"),
    ("node", "application/octet-stream"),
    ("exe", "application/x-msdownload"),
    ("pri", "application/octet-stream"),
    ("yml", "application/yaml"),
    ("yaml", "application/yaml"),
    ("appinstaller", "application/appinstaller"),
)

CONTENT_TYPE_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("/AppxManifest.xml", "application/vnd.ms-appx.manifest+xml"),
    ("/AppxBlockMap.xml", "application/vnd.ms-appx.blockmap+xml"),
    ("/AppxSignature.p7x", "application/vnd.ms-appx.signature"),
    ("/AppxMetadata/CodeIntegrity.cat", "application/vnd.ms-pkiseccat"),
)


@dataclass(frozen=True)
class ManifestMetadata:
    """Everything the XML renderers need, derived once per build.

    Attributes:
        app_id: Package identity name (at most 10 uppercase letters when
            derived).
        app_name: Display name.
        app_description: Package description (defaults to app_name).
        publisher: Publisher distinguished name, always "CN=" prefixed.
        version: Four-part numeric package version.
        executable: Package-relative path of the primary executable.
        architecture: Processor architecture.
        msix_filename: File name of the package.
        appinstaller_filename: File name of the install descriptor.
        base_download_url: Where the package is published, if anywhere.
        make_appinstaller: Whether the install descriptor is generated.
    """

    app_id: str
    app_name: str
    app_description: str
    publisher: str
    version: str
    executable: str
    architecture: str
    msix_filename: str
    appinstaller_filename: str
    base_download_url: str | None
    make_appinstaller: bool
    protocols: tuple[ProtocolSpec, ...] = ()
    app_uri_handlers: tuple[str, ...] = ()
    app_capabilities: tuple[str, ...] = ()
    allow_rollbacks: bool = True
    allow_external_content: bool = False
    run_at_startup: bool = False
    startup_params: str | None = None
    exe_alias: bool = False
    copilot_key: CopilotKeyConfig | None = None

    @property
    def generates_install_descriptor(self) -> bool:
        return bool(self.base_download_url) and self.make_appinstaller


# -------------------------------
# Value helpers
# -------------------------------


def xml_safe_string(value: str | None) -> str:
    """Escape &, ", < and > for use in XML text or attribute values.

    None renders as an empty string.

    Example:
        >>> xml_safe_string('Tom & "Jerry" <3')
        'Tom &amp; &quot;Jerry&quot; &lt;3'
    """
    if not value:
        return ""
    for raw, entity in _ENTITY_REPLACEMENTS:
        value = value.replace(raw, entity)
    return value


def msix_safe_version(version: str) -> str:
    """Normalize any version string to the four-part numeric form.

    Digit runs are taken in order, non-numeric fragments are dropped, and
    the result is padded with zeros or truncated to four components.

    Example:
        >>> msix_safe_version("1.2")
        '1.2.0.0'
        >>> msix_safe_version("2.0.0.0.0")
        '2.0.0.0'
        >>> msix_safe_version("1.4.0-beta.3")
        '1.4.0.3'
    """
    parts = re.findall(r"\d+", version)
    return ".".join((parts + ["0", "0", "0", "0"])[:4])


def derive_app_id(app_name: str) -> str:
    """Uppercase the name, keep only letters A-Z, truncate to 10.

    Example:
        >>> derive_app_id("My Cool App!")
        'MYCOOLAPP'
    """
    return re.sub(r"[^A-Z]", "", app_name.upper())[:APP_ID_MAX_LENGTH]


def ensure_distinguished_name(publisher: str) -> str:
    """Prefix the publisher with "CN=" unless it already starts with it."""
    if publisher.startswith(DISTINGUISHED_NAME_PREFIX):
        return publisher
    return f"{DISTINGUISHED_NAME_PREFIX}{publisher}"


def check_appinstaller_settings(config: BuildConfig) -> None:
    """Fail if an install descriptor is demanded without a download URL.

    Raises:
        MissingBaseURLError: If make_appinstaller is explicitly true and no
            base_download_url is configured.
    """
    if config.make_appinstaller is True and not config.base_download_url:
        raise MissingBaseURLError(
            "make_appinstaller is enabled but base_download_url is not set"
        )


# -------------------------------
# Publisher resolution
# -------------------------------


def parse_publisher(sigcheck_output: str) -> str | None:
    """Extract the Publisher field from sigcheck output, if present."""
    match = _PUBLISHER_RE.search(sigcheck_output)
    return match.group("publisher") if match else None


def resolve_publisher(
    executable: Path,
    sigcheck: Path | str,
    *,
    timeout: float | None = None,
    invoker: Callable[..., str] = invoke_tool,
) -> str:
    """Read the publisher from a signed executable with sigcheck.

    Args:
        executable: Signed file to inspect.
        sigcheck: Path to sigcheck.exe.
        timeout: Optional tool timeout in seconds.
        invoker: Tool runner; replaced in tests.

    Returns:
        The publisher as printed by sigcheck.

    Raises:
        PublisherResolutionFailure: If sigcheck prints no publisher.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    stdout = invoker(
        sigcheck, ["-accepteula", str(executable)], allow_nonzero_exit=True, timeout=timeout
    )
    publisher = parse_publisher(stdout)
    if not publisher:
        raise PublisherResolutionFailure(
            f"Could not determine publisher: {executable} is not signed "
            f"or sigcheck is not installed."
        )

    logger.verbose("MANIFEST", f"Publisher from {executable.name}: {publisher}")
    return publisher


def resolve_publisher_from_mapping(
    mapping: FileMapping,
    sigcheck: Path | str,
    *,
    timeout: float | None = None,
    invoker: Callable[..., str] = invoke_tool,
) -> str:
    """Read the publisher from the first signed binary in a mapping.

    Executables are tried before DLLs, each group in package path order.

    Raises:
        PublisherResolutionFailure: If no candidate file is signed.
    """
    for suffix in _SIGNED_SUFFIXES:
        for key in sorted(mapping):
            if not key.lower().endswith(suffix):
                continue
            try:
                return resolve_publisher(
                    mapping[key], sigcheck, timeout=timeout, invoker=invoker
                )
            except PublisherResolutionFailure:
                continue

    raise PublisherResolutionFailure(
        "Could not determine publisher: no signed executable found in the package"
    )


# -------------------------------
# Metadata
# -------------------------------


def derive_metadata(
    config: BuildConfig,
    context: BuildContext,
    executable: str,
    *,
    publisher: str | None = None,
) -> ManifestMetadata:
    """Combine configuration and build context into ManifestMetadata.

    Args:
        config: Build configuration.
        context: Build context for this run.
        executable: Package-relative path of the primary executable.
        publisher: Publisher resolved by the caller; required when the
            config does not set one.

    Returns:
        The frozen metadata snapshot.

    Raises:
        MissingBaseURLError: If an install descriptor is demanded without
            a download URL.
        PublisherResolutionFailure: If no publisher is available.
    """
    check_appinstaller_settings(config)

    resolved_publisher = config.publisher or publisher
    if not resolved_publisher:
        raise PublisherResolutionFailure(
            "No publisher configured and none was resolved from a signed executable"
        )

    app_name = context.app_name
    arch = context.target_arch

    capabilities = tuple(dict.fromkeys(config.app_capabilities))

    return ManifestMetadata(
        app_id=config.internal_app_id or derive_app_id(app_name),
        app_name=app_name,
        app_description=config.app_description or app_name,
        publisher=ensure_distinguished_name(resolved_publisher),
        version=msix_safe_version(context.version),
        executable=executable,
        architecture=arch,
        msix_filename=f"{app_name}-{arch}-{context.version}.msix",
        appinstaller_filename=f"{app_name}-{arch}.appinstaller",
        base_download_url=config.base_download_url,
        make_appinstaller=(
            True if config.make_appinstaller is None else config.make_appinstaller
        ),
        protocols=config.protocols,
        app_uri_handlers=config.app_uri_handlers,
        app_capabilities=capabilities,
        allow_rollbacks=True if config.allow_rollbacks is None else config.allow_rollbacks,
        allow_external_content=config.allow_external_content,
        run_at_startup=config.run_at_startup,
        startup_params=config.startup_params,
        exe_alias=config.exe_alias,
        copilot_key=config.copilot_key,
    )


# -------------------------------
# Manifest fragments
# -------------------------------


def _render_startup_extension(metadata: ManifestMetadata) -> str:
    if not metadata.run_at_startup:
        return ""
    params = (
        f'\n          uap11:Parameters="{xml_safe_string(metadata.startup_params)}"'
        if metadata.startup_params
        else ""
    )
    return f"""
        <desktop:Extension
          Category="windows.startupTask"
          Executable="{xml_safe_string(metadata.executable)}"{params}
          EntryPoint="Windows.FullTrustApplication">
          <desktop:StartupTask TaskId="{xml_safe_string(metadata.app_id)}.Startup" Enabled="true" DisplayName="{xml_safe_string(metadata.app_name)}" />
        </desktop:Extension>"""


def _render_alias_extension(metadata: ManifestMetadata) -> str:
    if not metadata.exe_alias:
        return ""
    alias = re.split(r"[/\\]", metadata.executable)[-1]
    return f"""
        <uap3:Extension
          Category="windows.appExecutionAlias"
          Executable="{xml_safe_string(metadata.executable)}"
          EntryPoint="Windows.FullTrustApplication">
          <uap3:AppExecutionAlias>
            <desktop:ExecutionAlias Alias="{xml_safe_string(alias)}" />
          </uap3:AppExecutionAlias>
        </uap3:Extension>"""


def _render_protocol_extensions(metadata: ManifestMetadata) -> str:
    fragments = []
    for group in metadata.protocols:
        for scheme in group.schemes:
            display = scheme if scheme == group.name else f"{group.name} ({scheme})"
            fragments.append(
                f"""
        <uap3:Extension Category="windows.protocol">
          <uap3:Protocol Name="{xml_safe_string(scheme)}" Parameters="&quot;%1&quot;">
            <uap:DisplayName>{xml_safe_string(display)}</uap:DisplayName>
          </uap3:Protocol>
        </uap3:Extension>"""
            )
    return "".join(fragments)


def _render_uri_handler_extensions(metadata: ManifestMetadata) -> str:
    return "".join(
        f"""
        <uap3:Extension Category="windows.appUriHandler">
          <uap3:AppUriHandler>
            <uap3:Host Name="{xml_safe_string(host)}" />
          </uap3:AppUriHandler>
        </uap3:Extension>"""
        for host in metadata.app_uri_handlers
    )


def _render_copilot_action(tag: str, action: CopilotKeyAction | None) -> str:
    if action is None:
        return ""
    wparam = (
        f' MessageWParam="{xml_safe_string(str(action.wparam))}"'
        if action.wparam is not None
        else ""
    )
    return f"\n              <{tag}{wparam}>{xml_safe_string(action.url)}</{tag}>"


def _render_copilot_key_extension(metadata: ManifestMetadata) -> str:
    copilot_key = metadata.copilot_key
    if copilot_key is None:
        return ""
    actions = (
        _render_copilot_action("SingleTap", copilot_key.tap)
        + _render_copilot_action("PressAndHoldStart", copilot_key.start)
        + _render_copilot_action("PressAndHoldStop", copilot_key.stop)
    )
    return f"""
        <uap3:Extension Category="windows.appExtension">
          <uap3:AppExtension Name="com.microsoft.windows.copilotkeyprovider"
            DisplayName="{xml_safe_string(metadata.app_name)} - Copilot Key"
            Id="{xml_safe_string(metadata.app_id)}"
            Description="{xml_safe_string(metadata.app_description)}"
            PublicFolder="Public">
            <uap3:Properties>{actions}
            </uap3:Properties>
          </uap3:AppExtension>
        </uap3:Extension>"""


def _render_auto_update(metadata: ManifestMetadata) -> str:
    if not metadata.generates_install_descriptor:
        return ""
    return f"""
        <uap13:AutoUpdate>
            <uap13:AppInstaller File="{xml_safe_string(metadata.appinstaller_filename)}" />
        </uap13:AutoUpdate>"""


def _render_capabilities(metadata: ManifestMetadata) -> str:
    return "".join(
        "\n        "
        + _CAPABILITY_ELEMENTS[cap].format(
            name=xml_safe_string(_CAPABILITY_NAMES[cap])
        )
        for cap in dict.fromkeys(metadata.app_capabilities)
        if cap in _CAPABILITY_ELEMENTS
    )


def _render_extensions(metadata: ManifestMetadata) -> str:
    return (
        _render_startup_extension(metadata)
        + _render_alias_extension(metadata)
        + _render_protocol_extensions(metadata)
        + _render_uri_handler_extensions(metadata)
        + _render_copilot_key_extension(metadata)
    )


# -------------------------------
# Documents
# -------------------------------


def render_package_manifest(metadata: ManifestMetadata) -> str:
    """Render AppxManifest.xml for the metadata snapshot."""
    app_id = xml_safe_string(metadata.app_id)
    app_name = xml_safe_string(metadata.app_name)
    executable = xml_safe_string(metadata.executable)

    if metadata.copilot_key is not None:
        min_version, max_version_tested = COPILOT_MIN_VERSION, COPILOT_MAX_VERSION_TESTED
    else:
        min_version, max_version_tested = DEFAULT_MIN_VERSION, DEFAULT_MAX_VERSION_TESTED

    allow_external = "true" if metadata.allow_external_content else "false"

    return f"""<?xml version="1.0" encoding="utf-8"?>
<Package xmlns="http://schemas.microsoft.com/appx/manifest/foundation/windows10"
    xmlns:uap="http://schemas.microsoft.com/appx/manifest/uap/windows10"
    xmlns:uap3="http://schemas.microsoft.com/appx/manifest/uap/windows10/3"
    xmlns:uap6="http://schemas.microsoft.com/appx/manifest/uap/windows10/6"
    xmlns:uap10="http://schemas.microsoft.com/appx/manifest/uap/windows10/10"
    xmlns:uap11="http://schemas.microsoft.com/appx/manifest/uap/windows10/11"
    xmlns:uap13="http://schemas.microsoft.com/appx/manifest/uap/windows10/13"
    xmlns:desktop="http://schemas.microsoft.com/appx/manifest/desktop/windows10"
    xmlns:desktop2="http://schemas.microsoft.com/appx/manifest/desktop/windows10/2"
    xmlns:desktop7="http://schemas.microsoft.com/appx/manifest/desktop/windows10/7"
    xmlns:rescap="http://schemas.microsoft.com/appx/manifest/foundation/windows10/restrictedcapabilities"
    IgnorableNamespaces="uap uap3 uap10 desktop7 rescap">
    <Identity Name="{app_id}" Publisher="{xml_safe_string(metadata.publisher)}" Version="{xml_safe_string(metadata.version)}" ProcessorArchitecture="{xml_safe_string(metadata.architecture)}" />
    <Properties>
        <DisplayName>{app_name}</DisplayName>
        <PublisherDisplayName>{app_name}</PublisherDisplayName>
        <Description>{xml_safe_string(metadata.app_description)}</Description>
        <Logo>assets\\StoreLogo.png</Logo>
        <uap10:PackageIntegrity>
            <uap10:Content Enforcement="on" />
        </uap10:PackageIntegrity>
        <uap10:AllowExternalContent>{allow_external}</uap10:AllowExternalContent>{_render_auto_update(metadata)}
    </Properties>
    <Resources>
        <Resource Language="en-us" />
    </Resources>
    <Dependencies>
        <TargetDeviceFamily Name="Windows.Desktop" MinVersion="{min_version}" MaxVersionTested="{max_version_tested}" />
    </Dependencies>
    <Capabilities>
        <rescap:Capability Name="runFullTrust" />
        <rescap:Capability Name="packageManagement" />
        <Capability Name="internetClient" />{_render_capabilities(metadata)}
    </Capabilities>
    <Applications>
        <Application Id="{app_id}" Executable="{executable}"
            EntryPoint="Windows.FullTrustApplication">
            <uap:VisualElements BackgroundColor="transparent" DisplayName="{app_name}"
                Square150x150Logo="assets\\{app_id}-150x150Logo.png"
                Square44x44Logo="assets\\{app_id}-44x44Logo.png" Description="{app_name}">
                <uap:DefaultTile Wide310x150Logo="assets\\{app_id}-310x150Logo.png"
                    Square310x310Logo="assets\\{app_id}-310x310Logo.png"
                    Square71x71Logo="assets\\{app_id}-71x71Logo.png" />
            </uap:VisualElements>
            <Extensions>{_render_extensions(metadata)}
            </Extensions>
        </Application>
    </Applications>
    <Extensions>
        <desktop2:Extension Category="windows.firewallRules">
            <desktop2:FirewallRules Executable="{executable}">
                <desktop2:Rule Direction="in" IPProtocol="TCP" Profile="all" />
                <desktop2:Rule Direction="out" IPProtocol="TCP" Profile="all" />
            </desktop2:FirewallRules>
        </desktop2:Extension>
    </Extensions>
</Package>
"""


def render_content_types() -> str:
    """Render [Content_Types].xml."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>',
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">',
    ]
    for extension, content_type in CONTENT_TYPE_DEFAULTS:
        lines.append(
            f'    <Default Extension="{extension}" ContentType="{content_type}" />'
        )
    for part_name, content_type in CONTENT_TYPE_OVERRIDES:
        lines.append(
            f'    <Override PartName="{part_name}" ContentType="{content_type}" />'
        )
    lines.append("</Types>")
    return "\n".join(lines) + "\n"


def _download_uri(base_download_url: str, filename: str) -> str:
    # requote_uri percent-encodes spaces and other unsafe characters
    return requests.utils.requote_uri(f"{base_download_url.rstrip('/')}/{filename}")


def render_install_descriptor(metadata: ManifestMetadata) -> str | None:
    """Render the .appinstaller descriptor.

    Returns:
        The XML, or None when no download URL is configured or descriptor
        generation is switched off.
    """
    if not metadata.generates_install_descriptor:
        return None

    base = metadata.base_download_url or ""
    appinstaller_uri = xml_safe_string(_download_uri(base, metadata.appinstaller_filename))
    msix_uri = xml_safe_string(_download_uri(base, metadata.msix_filename))
    force_update = "true" if metadata.allow_rollbacks else "false"

    return f"""<?xml version="1.0" encoding="utf-8"?>
<AppInstaller
    xmlns="http://schemas.microsoft.com/appx/appinstaller/2021"
    Version="1.0.0.0"
    Uri="{appinstaller_uri}">
    <MainBundle
        Name="{xml_safe_string(metadata.app_id)}"
        Publisher="{xml_safe_string(metadata.publisher)}"
        Version="{xml_safe_string(metadata.version)}"
        Uri="{msix_uri}" />
    <UpdateSettings>
        <OnLaunch HoursBetweenUpdateChecks="12" />
        <ForceUpdateFromAnyVersion>{force_update}</ForceUpdateFromAnyVersion>
    </UpdateSettings>
    <UpdateUris>
        <UpdateUri>{appinstaller_uri}</UpdateUri>
    </UpdateUris>
    <RepairUris>
        <RepairUri>{appinstaller_uri}</RepairUri>
    </RepairUris>
</AppInstaller>
"""


# -------------------------------
# Writers
# -------------------------------


def write_package_manifest(out_dir: Path, metadata: ManifestMetadata) -> Path:
    """Write AppxManifest.xml into out_dir and return its path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / MANIFEST_FILENAME
    path.write_text(render_package_manifest(metadata), encoding="utf-8")
    return path


def write_content_types(out_dir: Path) -> Path:
    """Write [Content_Types].xml into out_dir and return its path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / CONTENT_TYPES_FILENAME
    path.write_text(render_content_types(), encoding="utf-8")
    return path


def write_install_descriptor(
    out_dir: Path, embed_dir: Path, metadata: ManifestMetadata
) -> Path | None:
    """Write the install descriptor to out_dir and embed a copy in the package.

    Returns:
        Path of the descriptor in out_dir, or None when generation is off.
    """
    from msixmaker.logging import get_global_logger

    logger = get_global_logger()
    xml = render_install_descriptor(metadata)
    if xml is None:
        logger.verbose("MANIFEST", "No install descriptor configured, skipping")
        return None

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / metadata.appinstaller_filename
    out_path.write_text(xml, encoding="utf-8")
    (embed_dir / metadata.appinstaller_filename).write_text(xml, encoding="utf-8")

    logger.verbose("MANIFEST", f"[OK] Install descriptor: {out_path}")
    return out_path
