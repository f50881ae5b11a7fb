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

import enum
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from psutil import NoSuchProcess, Process

from container_identity.linux.cgroup_source import (
    CGROUP_PROCFILE,
    CgroupSource,
    FileCgroupSource,
    ProcessCgroupSource,
)
from container_identity.linux.cgroups import iter_cgroup_lines
from container_identity.linux.containers import classify_cgroup_path, find_container_id
from container_identity.logging import get_logger

logger = get_logger()


class ResolveMode(enum.Enum):
    # only the container id, first match wins
    FAST = "fast"
    # container id & pod id, last match wins, with the parsed cgroup lines
    DETAILED = "detailed"


@dataclass(frozen=True)
class CgroupRecord:
    hier_id: int
    path: str
    controllers: Tuple[str, ...]
    container_id: Optional[str] = None
    pod_id: Optional[str] = None


@dataclass(frozen=True)
class Identity:
    container_id: Optional[str] = None
    pod_id: Optional[str] = None
    # Empty unless resolved in DETAILED mode
    cgroups: Tuple[CgroupRecord, ...] = ()

    @classmethod
    def empty(cls) -> "Identity":
        return cls()

    def __bool__(self) -> bool:
        return self.container_id is not None or self.pod_id is not None


def resolve(source: CgroupSource, mode: ResolveMode = ResolveMode.DETAILED) -> Identity:
    """
    Resolve the container & pod identity from a cgroup source.
    A missing or unreadable source resolves to an empty Identity, most hosts that don't run containers lack it.
    """
    if not source.exists() or not source.readable():
        return Identity.empty()

    if mode is ResolveMode.FAST:
        return Identity(container_id=_resolve_container_id(source))
    return _resolve_detailed(source)


def _resolve_container_id(source: CgroupSource) -> Optional[str]:
    try:
        return find_container_id(source.lines())
    except OSError:
        logger.warning("Unable to read cgroup file %r", source, exc_info=True)
        return None


def _resolve_detailed(source: CgroupSource) -> Identity:
    container_id: Optional[str] = None
    pod_id: Optional[str] = None
    records: List[CgroupRecord] = []

    try:
        for cgroup_line in iter_cgroup_lines(source.lines()):
            line_container_id, line_pod_id = classify_cgroup_path(cgroup_line.path)
            records.append(
                CgroupRecord(
                    hier_id=cgroup_line.hier_id,
                    path=cgroup_line.path,
                    controllers=tuple(cgroup_line.controllers),
                    container_id=line_container_id,
                    pod_id=line_pod_id,
                )
            )
            # A line without ids never resets what earlier lines found
            if line_container_id:
                container_id = line_container_id
            if line_pod_id:
                pod_id = line_pod_id
    except OSError:
        # Keep whatever was found before the failure
        logger.warning("Unable to read cgroup file %r", source, exc_info=True)

    return Identity(container_id=container_id, pod_id=pod_id, cgroups=tuple(records))


class _Sentinel:
    pass


_SENTINEL = _Sentinel()


class _ResolveOnce:
    """
    Lazily computes a value once for the process lifetime.
    Concurrent first callers block on the lock, and all of them get the same object. Once set, reads take no lock.
    """

    def __init__(self, compute: Callable[[], Identity]) -> None:
        self._compute = compute
        self._lock = threading.Lock()
        self._value: Union[Identity, _Sentinel] = _SENTINEL

    def get(self) -> Identity:
        value = self._value
        if isinstance(value, _Sentinel):
            with self._lock:
                if isinstance(self._value, _Sentinel):
                    self._value = self._compute()
                value = self._value
        assert isinstance(value, Identity)
        return value

    def clear(self) -> None:
        with self._lock:
            self._value = _SENTINEL


def default_cgroup_source() -> CgroupSource:
    return FileCgroupSource(CGROUP_PROCFILE)


# cgroup membership of a running process doesn't change, so the default source is resolved once per mode.
_cached_identity = _ResolveOnce(lambda: resolve(default_cgroup_source(), ResolveMode.DETAILED))
_cached_container_id = _ResolveOnce(lambda: resolve(default_cgroup_source(), ResolveMode.FAST))


def resolve_identity(source: Optional[CgroupSource] = None) -> Identity:
    """
    Gets the container id & pod id of the current process (or of the given source).
    Results for the default source are cached.
    """
    if source is None:
        return _cached_identity.get()
    return resolve(source, ResolveMode.DETAILED)


def resolve_container_id(source: Optional[CgroupSource] = None) -> Optional[str]:
    """
    Gets the container id of the current process (or of the given source), or None if not in a container.
    Results for the default source are cached.
    """
    if source is None:
        return _cached_container_id.get().container_id
    return resolve(source, ResolveMode.FAST).container_id


def get_process_identity(process: Process) -> Identity:
    """
    :raises NoSuchProcess: If the process doesn't or no longer exists
    :raises AccessDenied: If the cgroup file of the process can't be read
    """
    if not process.is_running():
        raise NoSuchProcess(process.pid)
    return resolve(ProcessCgroupSource(process), ResolveMode.DETAILED)


def is_running_in_container() -> bool:
    """
    True when a container id was found for the current process. A readable cgroup file alone isn't enough,
    bare-metal hosts and VMs have one too.
    """
    return resolve_container_id() is not None


def clear_cache() -> None:
    _cached_identity.clear()
    _cached_container_id.clear()
