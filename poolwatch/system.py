import platform
import socket
from dataclasses import dataclass

import psutil

from poolwatch.threads import ThreadInspector


@dataclass
class SystemInfo:
    available_processors: int
    python_version: str
    thread_count: int
    host_name: str

    def to_dict(self):
        return {
            "availableProcessors": self.available_processors,
            "pythonVersion": self.python_version,
            "threadCount": self.thread_count,
            "hostName": self.host_name,
        }


def available_processors() -> int:
    return psutil.cpu_count(logical=True) or 1


def resolve_host_name() -> str:
    """
    Canonical name of the local host.
    Raises OSError (socket.gaierror) when the name does not resolve.
    """
    hostname = socket.gethostname()
    infos = socket.getaddrinfo(hostname, None, flags=socket.AI_CANONNAME)
    return infos[0][3] or hostname


def read_system_info(inspector: ThreadInspector) -> SystemInfo:
    return SystemInfo(
        available_processors=available_processors(),
        python_version=platform.python_version(),
        thread_count=len(inspector.snapshot()),
        host_name=resolve_host_name(),
    )
