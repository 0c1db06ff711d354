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

"""MSIX build pipeline for msixmaker.

This package turns a staged application directory into an MSIX package:
tile assets, file mapping, manifests, resource index, packing and signing.

Example:
    from pathlib import Path
    from msixmaker.build import BuildContext, MSIXPackager
    from msixmaker.config import load_build_config

    config = load_build_config(Path("msix.yaml"))
    context = BuildContext(
        app_name="MyApp",
        version="1.2.0",
        target_arch="x64",
        staged_dir=Path("out/MyApp-win32-x64"),
        output_dir=Path("out/make"),
    )

    for artifact in MSIXPackager(config).build(context):
        print(f"{artifact.kind.value}: {artifact.path}")
"""

from .context import BuildContext
from .manager import MSIXPackager, build_msix
from .manifest import ManifestMetadata, derive_metadata
from .mapping import FileMapping, scan

__all__ = [
    "BuildContext",
    "FileMapping",
    "MSIXPackager",
    "ManifestMetadata",
    "build_msix",
    "derive_metadata",
    "scan",
]
