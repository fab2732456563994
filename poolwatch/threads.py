from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import psutil


class ThreadState(Enum):
    RUNNABLE = "runnable"
    BLOCKED = "blocked"
    WAITING = "waiting"
    STOPPED = "stopped"
    TERMINATED = "terminated"
    UNKNOWN = "unknown"


# procfs state letters, see proc(5)
PROCFS_STATES = {
    "R": ThreadState.RUNNABLE,
    "D": ThreadState.BLOCKED,
    "S": ThreadState.WAITING,
    "I": ThreadState.WAITING,
    "T": ThreadState.STOPPED,
    "t": ThreadState.STOPPED,
    "Z": ThreadState.TERMINATED,
    "X": ThreadState.TERMINATED,
    "x": ThreadState.TERMINATED,
}


@dataclass(frozen=True)
class ThreadInfo:
    ident: int
    name: str
    state: ThreadState


class ThreadInspector(Protocol):
    def snapshot(self) -> list[ThreadInfo]:
        ...


def parse_stat(data: bytes) -> tuple[str, str]:
    """
    Extract (name, state letter) from a /proc/<pid>/task/<tid>/stat line.
    The name may itself contain spaces and parentheses, so it spans from
    the first '(' to the last ')'.
    """
    text = data.decode("utf-8", errors="replace")
    start = text.index("(")
    end = text.rindex(")")
    rest = text[end + 1:].split()
    if not rest:
        raise ValueError(f"truncated stat line: {text!r}")
    return text[start + 1:end], rest[0]


def state_from_code(code: str) -> ThreadState:
    return PROCFS_STATES.get(code, ThreadState.UNKNOWN)


class ProcfsThreadInspector:
    """Reads per-thread scheduling state from procfs (Linux)."""

    def __init__(self, pid: int | None = None, procfs_path: str | None = None):
        self.pid = pid if pid is not None else os.getpid()
        self.procfs_path = procfs_path or psutil.PROCFS_PATH

    @property
    def task_dir(self) -> str:
        return os.path.join(self.procfs_path, str(self.pid), "task")

    def snapshot(self) -> list[ThreadInfo]:
        threads = []
        with os.scandir(self.task_dir) as entries:
            for entry in entries:
                if not entry.name.isdigit():
                    continue
                try:
                    with open(os.path.join(entry.path, "stat"), "rb") as f:
                        data = f.read()
                except (FileNotFoundError, ProcessLookupError):
                    # thread exited after the directory was listed
                    continue
                try:
                    name, code = parse_stat(data)
                except ValueError:
                    # empty or torn read
                    continue
                threads.append(ThreadInfo(ident=int(entry.name), name=name, state=state_from_code(code)))
        return threads


class PsutilThreadInspector:
    """
    Portable fallback. psutil lists thread ids on every platform it
    supports but only procfs exposes their state, so every entry is UNKNOWN.
    """

    def __init__(self, pid: int | None = None):
        self.pid = pid if pid is not None else os.getpid()

    def snapshot(self) -> list[ThreadInfo]:
        proc = psutil.Process(self.pid)
        return [
            ThreadInfo(ident=t.id, name=str(t.id), state=ThreadState.UNKNOWN)
            for t in proc.threads()
        ]


def default_inspector() -> ThreadInspector:
    procfs = ProcfsThreadInspector()
    if os.path.isdir(procfs.task_dir):
        return procfs
    return PsutilThreadInspector()
