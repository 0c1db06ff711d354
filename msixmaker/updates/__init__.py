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

"""Update channel and app-update.yml generation."""

from .channel import (
    APP_UPDATE_FILENAME,
    compute_channel,
    file_sha512,
    find_installers,
    get_app_update_yml,
    write_app_update_yml,
    write_channel_file,
)

__all__ = [
    "APP_UPDATE_FILENAME",
    "compute_channel",
    "file_sha512",
    "find_installers",
    "get_app_update_yml",
    "write_app_update_yml",
    "write_channel_file",
]
