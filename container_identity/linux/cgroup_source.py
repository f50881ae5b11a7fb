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

import os
from pathlib import Path
from typing import Iterator, Union

import psutil

from container_identity.linux.process import proc_file_path, translate_proc_errors

CGROUP_PROCFILE = "/proc/self/cgroup"


class CgroupSource:
    """
    Where cgroup membership lines come from.
    lines() is lazy and can be iterated once; the kernel generates /proc/<pid>/cgroup on open.
    """

    def exists(self) -> bool:
        raise NotImplementedError

    def readable(self) -> bool:
        raise NotImplementedError

    def lines(self) -> Iterator[str]:
        raise NotImplementedError


class FileCgroupSource(CgroupSource):
    def __init__(self, path: Union[str, Path] = CGROUP_PROCFILE) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def readable(self) -> bool:
        return os.access(self.path, os.R_OK)

    def lines(self) -> Iterator[str]:
        # cgroup names are arbitrary bytes
        with self.path.open(encoding="utf-8", errors="replace") as f:
            for line in f:
                yield line.rstrip("\n")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path.as_posix()!r})"


class ProcessCgroupSource(FileCgroupSource):
    """
    The cgroup file of another process.
    :raises NoSuchProcess: (from lines()) If the process doesn't or no longer exists
    :raises AccessDenied: (from readable() and lines()) If the file can't be read
    """

    def __init__(self, process: psutil.Process) -> None:
        super().__init__(proc_file_path(process, "cgroup"))
        self.process = process

    def readable(self) -> bool:
        if not super().readable():
            raise psutil.AccessDenied(self.process.pid)
        return True

    def lines(self) -> Iterator[str]:
        with translate_proc_errors(self.process):
            yield from super().lines()


class StaticCgroupSource(CgroupSource):
    """Cgroup content already held in memory."""

    def __init__(self, content: str) -> None:
        self.content = content

    def exists(self) -> bool:
        return True

    def readable(self) -> bool:
        return True

    def lines(self) -> Iterator[str]:
        return iter(self.content.splitlines())
