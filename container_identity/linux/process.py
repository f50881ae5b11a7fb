#
# Copyright (c) Granulate. All rights reserved.
# Licensed under the AGPL3 License. See LICENSE.md in the project root for license information.
#
import os
from contextlib import contextmanager
from typing import Generator

import psutil


def proc_file_path(process: psutil.Process, name: str) -> str:
    return f"/proc/{process.pid}/{name}"


@contextmanager
def translate_proc_errors(process: psutil.Process) -> Generator[None, None, None]:
    try:
        yield
        # Don't use the result if PID has been reused
        if not process.is_running():
            raise psutil.NoSuchProcess(process.pid)
    except PermissionError:
        raise psutil.AccessDenied(process.pid)
    except ProcessLookupError:
        raise psutil.NoSuchProcess(process.pid)
    except FileNotFoundError:
        if not os.path.exists(f"/proc/{process.pid}"):
            raise psutil.NoSuchProcess(process.pid)
        raise
