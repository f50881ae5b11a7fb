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

import re
from typing import Iterable, Iterator, List, NamedTuple

from container_identity.exceptions import MalformedLine
from container_identity.logging import get_logger

# hierarchy-ID:controller-list:cgroup-path
# The path may contain colons itself, only the first two separate fields.
CGROUP_LINE_PATTERN = re.compile(r"^(\d+):([^:]*):(.+)$")


class CgroupLine(NamedTuple):
    """
    A single line of /proc/<pid>/cgroup.
    Example lines:
        4:cpu,cpuacct:/docker/<container-id>     (v1)
        0::/system.slice/docker-<container-id>.scope     (v2 unified hierarchy, no controllers)
    """

    hier_id: int
    controllers: List[str]
    path: str


def parse_cgroup_line(line: str) -> CgroupLine:
    """
    :raises MalformedLine: If the line is not in the hierarchy-ID:controller-list:cgroup-path form
    """
    match = CGROUP_LINE_PATTERN.match(line.rstrip("\n"))
    if match is None:
        raise MalformedLine(line)
    hier_id, controller_list, path = match.groups()
    return CgroupLine(int(hier_id), controller_list.split(",") if controller_list else [], path)


def iter_cgroup_lines(lines: Iterable[str], strict: bool = False) -> Iterator[CgroupLine]:
    """
    Parse the lines of a cgroup file lazily.
    In strict mode the first malformed line raises MalformedLine, otherwise malformed lines are skipped.
    """
    for line in lines:
        try:
            yield parse_cgroup_line(line)
        except MalformedLine:
            if strict:
                raise
            get_logger().debug("Skipping malformed cgroup line %r", line)


def parse_cgroup_lines(lines: Iterable[str], strict: bool = False) -> List[CgroupLine]:
    return list(iter_cgroup_lines(lines, strict))
