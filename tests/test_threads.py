"""Tests for thread enumeration."""

import os

import pytest

from poolwatch.threads import (
    ProcfsThreadInspector,
    PsutilThreadInspector,
    ThreadInfo,
    ThreadState,
    default_inspector,
    parse_stat,
    state_from_code,
)


def write_task(root, pid, tid, name, state):
    task = root / str(pid) / "task" / str(tid)
    task.mkdir(parents=True)
    (task / "stat").write_bytes(f"{tid} ({name}) {state} 1 {pid} {pid} 0 -1 4194304".encode())


class TestParseStat:
    """Tests for parsing procfs stat lines."""

    def test_simple_line(self):
        """Test name and state are extracted."""
        assert parse_stat(b"42 (python3) R 1 42 42 0 -1") == ("python3", "R")

    def test_name_with_spaces_and_parens(self):
        """Test a thread name containing ') ' is kept whole."""
        name, code = parse_stat(b"7 (AnyIO (worker) thread) S 1 7 7")
        assert name == "AnyIO (worker) thread"
        assert code == "S"

    def test_truncated_line(self):
        """Test a line without a state is rejected."""
        with pytest.raises(ValueError):
            parse_stat(b"7 (idle)")


class TestStateFromCode:
    """Tests for procfs state letter mapping."""

    @pytest.mark.parametrize(
        "code,state",
        [
            ("R", ThreadState.RUNNABLE),
            ("D", ThreadState.BLOCKED),
            ("S", ThreadState.WAITING),
            ("I", ThreadState.WAITING),
            ("T", ThreadState.STOPPED),
            ("Z", ThreadState.TERMINATED),
            ("?", ThreadState.UNKNOWN),
        ],
    )
    def test_mapping(self, code, state):
        """Test each letter maps to its state."""
        assert state_from_code(code) is state


class TestProcfsThreadInspector:
    """Tests for ProcfsThreadInspector against a fake procfs tree."""

    def test_snapshot_reads_every_task(self, tmp_path):
        """Test every task directory becomes a ThreadInfo."""
        write_task(tmp_path, 100, 100, "python3", "R")
        write_task(tmp_path, 100, 101, "AnyIO worker thread", "S")
        write_task(tmp_path, 100, 102, "AnyIO worker thread", "D")

        inspector = ProcfsThreadInspector(pid=100, procfs_path=str(tmp_path))
        threads = sorted(inspector.snapshot(), key=lambda t: t.ident)

        assert threads == [
            ThreadInfo(ident=100, name="python3", state=ThreadState.RUNNABLE),
            ThreadInfo(ident=101, name="AnyIO worker thread", state=ThreadState.WAITING),
            ThreadInfo(ident=102, name="AnyIO worker thread", state=ThreadState.BLOCKED),
        ]

    def test_thread_exiting_mid_scan_is_skipped(self, tmp_path):
        """Test a task directory without a stat file is ignored."""
        write_task(tmp_path, 100, 100, "python3", "R")
        (tmp_path / "100" / "task" / "101").mkdir()

        inspector = ProcfsThreadInspector(pid=100, procfs_path=str(tmp_path))
        threads = inspector.snapshot()

        assert [t.ident for t in threads] == [100]

    def test_malformed_stat_is_skipped(self, tmp_path):
        """Test truncated or empty stat files do not abort the snapshot."""
        write_task(tmp_path, 100, 100, "python3", "R")
        write_task(tmp_path, 100, 101, "AnyIO worker thread", "S")
        (tmp_path / "100" / "task" / "102").mkdir()
        (tmp_path / "100" / "task" / "102" / "stat").write_bytes(b"102 (AnyIO worker")
        (tmp_path / "100" / "task" / "103").mkdir()
        (tmp_path / "100" / "task" / "103" / "stat").write_bytes(b"")

        inspector = ProcfsThreadInspector(pid=100, procfs_path=str(tmp_path))
        threads = sorted(inspector.snapshot(), key=lambda t: t.ident)

        assert [t.ident for t in threads] == [100, 101]
        assert threads[0].state is ThreadState.RUNNABLE

    def test_missing_procfs_raises(self, tmp_path):
        """Test an unavailable task directory surfaces as OSError."""
        inspector = ProcfsThreadInspector(pid=100, procfs_path=str(tmp_path))

        with pytest.raises(OSError):
            inspector.snapshot()

    def test_defaults_to_current_process(self):
        """Test pid defaults to the current process."""
        inspector = ProcfsThreadInspector()
        assert inspector.pid == os.getpid()

    @pytest.mark.skipif(not os.path.isdir(f"/proc/{os.getpid()}/task"), reason="requires procfs")
    def test_live_snapshot_sees_calling_thread(self):
        """Test the live process has at least one runnable thread (this one)."""
        threads = ProcfsThreadInspector().snapshot()

        assert len(threads) >= 1
        assert any(t.state is ThreadState.RUNNABLE for t in threads)


class TestPsutilThreadInspector:
    """Tests for the portable psutil fallback."""

    def test_snapshot_lists_threads_with_unknown_state(self):
        """Test threads are listed but their state is not known."""
        threads = PsutilThreadInspector().snapshot()

        assert len(threads) >= 1
        assert all(t.state is ThreadState.UNKNOWN for t in threads)


def test_default_inspector_snapshot():
    """Test the default inspector works on the current platform."""
    assert len(default_inspector().snapshot()) >= 1
