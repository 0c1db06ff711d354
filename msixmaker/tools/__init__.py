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

"""External tool handling for msixmaker.

Public API:

run_tool : function
    Run a tool and return a ToolInvocationResult.
invoke_tool : function
    Run a tool and return its stdout.
resolve_tool : function
    Use a configured tool path or search the Windows SDK.
get_sigcheck : function
    Locate or download sigcheck.exe.
"""

from .invoker import TOOL_LOG_PREFIX, invoke_tool, run_tool
from .locate import find_in_windows_kits, get_sigcheck, resolve_tool

__all__ = [
    "TOOL_LOG_PREFIX",
    "find_in_windows_kits",
    "get_sigcheck",
    "invoke_tool",
    "resolve_tool",
    "run_tool",
]
