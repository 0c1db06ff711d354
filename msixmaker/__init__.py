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

"""
msixmaker - MSIX packages from staged Windows applications

A Python-based CLI tool and library that turns an already-built Windows
application directory into a signed MSIX package.

msixmaker provides:
  - Declarative YAML build configuration with shared defaults
  - Tile asset generation at every required size and scale
  - AppxManifest.xml, [Content_Types].xml and .appinstaller generation
  - Resource indexing and packing with the Windows SDK tools
  - Code signing with signtool.exe
  - Update channel files (latest.yml) for generic auto-update clients

Quick Start
-----------
Validate a build config:

    $ msixmaker validate msix.yaml

Build a package:

    $ msixmaker build msix.yaml --app-name MyApp --app-version 1.2.0 \\
        --dir out/MyApp-win32-x64 --out-dir out/make

For full CLI documentation:

    $ msixmaker --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
config : package
    YAML configuration loading and merging.
build : package
    Assets, file mapping, manifests, signing and the build pipeline.
tools : package
    External tool invocation and discovery.
updates : package
    Update channel and app-update.yml generation.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from msixmaker.build import BuildContext, MSIXPackager, build_msix
    from msixmaker.config import load_build_config
    from msixmaker.validation import validate_config
    from msixmaker.updates import compute_channel

For more details, see the individual module docstrings.
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Build MSIX packages from staged Windows applications"

# Re-export commonly used functions for convenience
from msixmaker.build import BuildContext, MSIXPackager, build_msix
from msixmaker.config import BuildConfig, load_build_config
from msixmaker.updates import compute_channel
from msixmaker.validation import validate_config

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "BuildConfig",
    "BuildContext",
    "MSIXPackager",
    "build_msix",
    "compute_channel",
    "load_build_config",
    "validate_config",
]
