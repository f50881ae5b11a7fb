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
from typing import Iterable, Optional, Tuple

# standard Docker uses /docker/container-id
# Docker with the systemd driver uses /system.slice/docker-container-id.scope
# ECS uses /ecs/uuid/container-id
# k8s (cgroupfs) uses /kubepods/{burstable,besteffort}/poduuid/container-id
# k8s (systemd) uses /kubepods.slice/kubepods-besteffort.slice/kubepods-besteffort-poduuid.slice/
#   cri-containerd-container-id.scope, with the dashes of the pod uuid replaced by underscores.
UUID_PATTERN = r"[0-9a-f]{8}[-_][0-9a-f]{4}[-_][0-9a-f]{4}[-_][0-9a-f]{4}[-_][0-9a-f]{12}"
CONTAINER_ID_PATTERN = r"[0-9a-f]{64}"

CONTAINER_SEGMENT_PATTERN = re.compile(
    rf"(?<![0-9a-f])({UUID_PATTERN}|{CONTAINER_ID_PATTERN})(?:\.scope|\.slice)?$"
)
POD_SEGMENT_PATTERN = re.compile(rf"pod({UUID_PATTERN})(?:\.slice)?$")
HEX_PATTERN = re.compile(r"[0-9a-f]+", re.IGNORECASE)


def classify_cgroup_path(path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Recover (container id, pod id) from a cgroup path.

    Only the two most specific segments take part: the leaf segment may hold the container id and its parent
    may hold the pod uid. Container ids are returned as bare hex (UUID separators removed), pod uids are returned
    as they appear in the path.
    """
    segments = [segment for segment in path.split("/") if segment]

    container_id = None
    if segments:
        container_match = CONTAINER_SEGMENT_PATTERN.search(segments[-1])
        if container_match is not None:
            container_id = re.sub(r"[-_]", "", container_match.group(1))

    pod_id = None
    if len(segments) >= 2:
        pod_match = POD_SEGMENT_PATTERN.search(segments[-2])
        if pod_match is not None:
            pod_id = pod_match.group(1)

    return container_id, pod_id


def extract_container_id(line: str) -> Optional[str]:
    """
    Take a container id out of the last section of a raw cgroup line, without parsing the line.

    Each '/' separated section may carry metadata around the id, before a '-' or after a '.':
        14:name=systemd:/docker/<id>
        0::/system.slice/docker-<id>.scope
    containerd 1.5+ with the systemd cgroup driver separates the id with a colon instead:
        0::/system.slice/containerd.service/kubepods-burstable-pod<uid>.slice:cri-containerd:<id>
    """
    line = line.rstrip("\n")
    last_section = line[line.rfind("/") + 1 :]

    colon_index = last_section.rfind(":")
    if colon_index != -1:
        candidate = last_section[colon_index + 1 :]
    else:
        start_index = last_section.rfind("-") + 1
        end_index = last_section.rfind(".")
        if end_index == -1:
            end_index = len(last_section)
        if start_index > end_index:
            return None
        candidate = last_section[start_index:end_index]

    if candidate and HEX_PATTERN.fullmatch(candidate):
        return candidate
    return None


def find_container_id(lines: Iterable[str]) -> Optional[str]:
    """Returns the first container id found in the given cgroup lines, scanning in order."""
    for line in lines:
        if not line.strip():
            continue
        container_id = extract_container_id(line)
        if container_id is not None:
            return container_id

    return None
