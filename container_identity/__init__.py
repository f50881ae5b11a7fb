#
# Copyright (C) 2023 Intel Corporation
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
from importlib.metadata import PackageNotFoundError, version

from container_identity.exceptions import MalformedLine  # noqa: F401
from container_identity.identity import (  # noqa: F401
    CgroupRecord,
    Identity,
    ResolveMode,
    clear_cache,
    get_process_identity,
    is_running_in_container,
    resolve,
    resolve_container_id,
    resolve_identity,
)
from container_identity.linux.cgroup_source import (  # noqa: F401
    CgroupSource,
    FileCgroupSource,
    ProcessCgroupSource,
    StaticCgroupSource,
)

try:
    __version__ = version("container-identity")
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.1"
