"""
Tests for msixmaker.build.signing module.

Tests code signing including:
- signtool.exe arguments for certificate files and thumbprints
- Directory signing of .exe, .dll and .node files
- Skipping when no codesign options are configured
- The set-once credential environment patch
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from msixmaker.build.signing import (
    CERTIFICATE_FILE_VAR,
    CERTIFICATE_PASSWORD_VAR,
    CredentialEnvironment,
    apply_credential_environment,
    codesign,
    credential_environment,
    signable_files,
)
from msixmaker.config import CodesignOptions

pytestmark = pytest.mark.unit


@pytest.fixture
def pfx_options(tmp_path) -> CodesignOptions:
    return CodesignOptions(
        certificate_file=tmp_path / "cert.pfx",
        certificate_password="hunter2",
        timestamp_server="http://timestamp.example.com",
    )


class TestSignableFiles:
    """Tests for selecting files to sign."""

    def test_binaries_only(self, tmp_path):
        """Test that only .exe, .dll and .node files are selected."""
        (tmp_path / "sub").mkdir()
        for name in ("app.exe", "lib.DLL", "sub/addon.node", "readme.txt", "app.asar"):
            (tmp_path / name).write_bytes(b"x")

        names = sorted(p.name for p in signable_files(tmp_path))

        assert names == ["addon.node", "app.exe", "lib.DLL"]


class TestCodesign:
    """Tests for codesign()."""

    def test_skipped_without_options(self, tmp_path):
        """Test that no signtool call happens without options."""
        with patch("msixmaker.build.signing.run_tool") as mock_run:
            patch_env = codesign(None, tmp_path, "signtool.exe")

        mock_run.assert_not_called()
        assert patch_env == CredentialEnvironment()

    def test_sign_file_with_certificate(self, tmp_path, pfx_options):
        """Test signtool arguments for a .pfx certificate."""
        package = tmp_path / "MyApp.msix"
        package.write_bytes(b"PK")

        with patch("msixmaker.build.signing.run_tool") as mock_run:
            codesign(pfx_options, package, "signtool.exe")

        executable, args = mock_run.call_args.args
        assert executable == "signtool.exe"
        assert args[:3] == ["sign", "/fd", "SHA256"]
        assert args[args.index("/f") + 1] == str(pfx_options.certificate_file)
        assert args[args.index("/p") + 1] == "hunter2"
        assert args[args.index("/tr") + 1] == "http://timestamp.example.com"
        assert args[args.index("/td") + 1] == "SHA256"
        assert args[-1] == str(package)

    def test_sign_with_thumbprint(self, tmp_path):
        """Test signtool arguments for a certificate store thumbprint."""
        options = CodesignOptions(certificate_sha1="ABCDEF0123")
        target = tmp_path / "app.exe"
        target.write_bytes(b"MZ")

        with patch("msixmaker.build.signing.run_tool") as mock_run:
            codesign(options, target, "signtool.exe")

        args = mock_run.call_args.args[1]
        assert args[args.index("/sha1") + 1] == "ABCDEF0123"
        assert "/f" not in args

    def test_sign_directory(self, tmp_path, pfx_options):
        """Test that every binary in a directory is signed in one call."""
        app_dir = tmp_path / "app"
        app_dir.mkdir()
        (app_dir / "app.exe").write_bytes(b"MZ")
        (app_dir / "lib.dll").write_bytes(b"MZ")
        (app_dir / "data.json").write_text("{}")

        with patch("msixmaker.build.signing.run_tool") as mock_run:
            codesign(pfx_options, app_dir, "signtool.exe")

        args = mock_run.call_args.args[1]
        assert str(app_dir / "app.exe") in args
        assert str(app_dir / "lib.dll") in args
        assert str(app_dir / "data.json") not in args

    def test_returns_credential_patch(self, tmp_path, pfx_options):
        """Test that certificate signing yields CSC_LINK and CSC_KEY_PASSWORD."""
        with patch("msixmaker.build.signing.run_tool"):
            patch_env = codesign(pfx_options, tmp_path, "signtool.exe")

        assert patch_env.variables == {
            CERTIFICATE_FILE_VAR: str(pfx_options.certificate_file),
            CERTIFICATE_PASSWORD_VAR: "hunter2",
        }

    def test_does_not_touch_environment(self, tmp_path, pfx_options, monkeypatch):
        """Test that signing itself leaves the process environment alone."""
        monkeypatch.delenv(CERTIFICATE_FILE_VAR, raising=False)

        with patch("msixmaker.build.signing.run_tool"):
            codesign(pfx_options, tmp_path, "signtool.exe")

        assert CERTIFICATE_FILE_VAR not in os.environ


class TestCredentialEnvironment:
    """Tests for the credential environment patch."""

    def test_thumbprint_yields_empty_patch(self):
        """Test that store-based signing has nothing to export."""
        assert credential_environment(CodesignOptions(certificate_sha1="AB")).variables == {}

    def test_apply_sets_missing(self):
        """Test that absent variables are set."""
        environ: dict[str, str] = {}
        patch_env = CredentialEnvironment(
            {CERTIFICATE_FILE_VAR: "cert.pfx", CERTIFICATE_PASSWORD_VAR: "pw"}
        )

        applied = apply_credential_environment(patch_env, environ)

        assert environ == {CERTIFICATE_FILE_VAR: "cert.pfx", CERTIFICATE_PASSWORD_VAR: "pw"}
        assert applied == [CERTIFICATE_FILE_VAR, CERTIFICATE_PASSWORD_VAR]

    def test_apply_never_overwrites(self):
        """Test that existing values are left untouched."""
        environ = {CERTIFICATE_FILE_VAR: "existing.pfx"}
        patch_env = CredentialEnvironment(
            {CERTIFICATE_FILE_VAR: "cert.pfx", CERTIFICATE_PASSWORD_VAR: "pw"}
        )

        applied = apply_credential_environment(patch_env, environ)

        assert environ[CERTIFICATE_FILE_VAR] == "existing.pfx"
        assert environ[CERTIFICATE_PASSWORD_VAR] == "pw"
        assert applied == [CERTIFICATE_PASSWORD_VAR]

    def test_apply_twice_is_idempotent(self):
        """Test that a second application changes nothing."""
        environ: dict[str, str] = {}
        patch_env = CredentialEnvironment({CERTIFICATE_FILE_VAR: Path("a.pfx").name})

        apply_credential_environment(patch_env, environ)
        assert apply_credential_environment(patch_env, environ) == []
