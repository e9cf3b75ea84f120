"""Shared fixtures for pysysmon tests."""

import threading
import time

import pytest

from pysysmon.models import (
    CpuInfo,
    DiskInfo,
    HostInfo,
    LoadAverage,
    MemoryInfo,
    MetricSnapshot,
    NetworkInterface,
    ProcessInfo,
)
from pysysmon.sampler import Sampler


def make_processes(count: int) -> tuple[ProcessInfo, ...]:
    return tuple(
        ProcessInfo(name=f"proc{i}", pid=1000 - i, cpu_percent=float(i), resident_memory_bytes=i * 1024)
        for i in range(count)
    )


def make_snapshot(**overrides) -> MetricSnapshot:
    """A snapshot where every query succeeded."""
    values = dict(
        cpu=CpuInfo(model="Test CPU 3000", core_count=4, clock_mhz=2400.0, usage_percent=50.0),
        memory=MemoryInfo(
            total_bytes=16 * 1024**3,
            available_bytes=8 * 1024**3,
            used_bytes=6 * 1024**3,
            used_percent=37.5,
            cached_bytes=1024**3,
            buffers_bytes=256 * 1024**2,
        ),
        disk=DiskInfo(
            mount_path="/",
            filesystem="ext4",
            total_bytes=500 * 1024**3,
            free_bytes=200 * 1024**3,
            used_bytes=300 * 1024**3,
            used_percent=60.0,
        ),
        network=(
            NetworkInterface("lo", 1024, 2048, 10, 20),
            NetworkInterface("eth0", 1536, 1048576, 30, 40),
        ),
        load=LoadAverage(0.52, 0.41, 0.3),
        processes=make_processes(15),
        taken_at=time.time(),
    )
    values.update(overrides)
    return MetricSnapshot(**values)


def make_host() -> HostInfo:
    return HostInfo(hostname="testbox", platform="ubuntu", platform_version="22.04", uptime_seconds=3661)


class FakeSampler(Sampler):
    """Sampler that returns canned data without touching the OS."""

    def __init__(self, snapshot: MetricSnapshot | None = None, host: HostInfo | None = None) -> None:
        super().__init__(cpu_window=0.0)
        self.snapshot = snapshot if snapshot is not None else make_snapshot()
        self.host = host if host is not None else make_host()
        self.calls = 0
        self.release = threading.Event()
        self.release.set()

    def sample(self) -> MetricSnapshot:
        self.calls += 1
        self.release.wait(timeout=5.0)
        return self.snapshot

    def query_host(self) -> HostInfo:
        return self.host


class FakeTimer:
    """Stands in for a Textual Timer."""

    def __init__(self, delay: float, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True

    def fire(self) -> None:
        assert not self.stopped
        self.callback()


class TimerFactory:
    """Records every timer a scheduler arms."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture
def fake_sampler() -> FakeSampler:
    return FakeSampler()


@pytest.fixture
def timers() -> TimerFactory:
    return TimerFactory()
