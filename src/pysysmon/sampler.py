"""Metric collection engine for pysysmon."""

import logging
import os
import platform
import socket
import threading
import time
from collections.abc import Callable
from typing import TypeVar

import psutil

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

logger = logging.getLogger(__name__)

T = TypeVar("T")

CPU_SAMPLE_WINDOW = 1.0
ROOT_PATH = os.path.abspath(os.sep)


def _query(name: str, func: Callable[[], T]) -> T | None:
    """Run one metric query, returning None if it fails for any reason."""
    try:
        return func()
    except Exception:
        logger.debug("Query %r failed", name, exc_info=True)
        return None


def _cpu_model() -> str:
    """Best-effort CPU model name."""
    try:
        with open("/proc/cpuinfo", encoding="utf-8") as fh:
            for line in fh:
                if line.startswith("model name"):
                    return line.split(":", 1)[1].strip()
    except OSError:
        pass
    return platform.processor() or platform.machine() or "Unknown"


def _platform_identity() -> tuple[str, str]:
    """Return (platform, version), e.g. ("ubuntu", "22.04") or ("darwin", "14.1")."""
    try:
        release = platform.freedesktop_os_release()
    except OSError:
        release = {}
    if release.get("ID"):
        return release["ID"], release.get("VERSION_ID", "")
    system = platform.system().lower()
    if system == "darwin":
        return system, platform.mac_ver()[0]
    return system, platform.release()


class Sampler:
    """
    Performs one round of metric collection using psutil.

    Every query is independent: a failing query leaves its field absent
    in the resulting snapshot and never aborts the round.
    """

    def __init__(
        self,
        cpu_window: float = CPU_SAMPLE_WINDOW,
        root_path: str = ROOT_PATH,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            cpu_window: Seconds over which CPU utilization is measured.
            root_path: Filesystem path whose usage is reported.
        """
        self._cpu_window = cpu_window
        self._root_path = root_path

    def sample(self) -> MetricSnapshot:
        """Collect a snapshot of the current system state. Never raises."""
        cpu = _query("cpu", self._query_cpu)
        memory = _query("memory", self._query_memory)
        disk = _query("disk", self._query_disk)
        network = _query("network", self._query_network)
        load = _query("load", self._query_load)
        processes = _query("processes", self._query_processes)

        return MetricSnapshot(
            cpu=cpu,
            memory=memory,
            disk=disk,
            network=network or (),
            load=load,
            processes=processes or (),
            taken_at=time.time(),
        )

    def query_host(self) -> HostInfo:
        """Query host identity. Falls back to a placeholder record on failure."""
        host = _query("host", self._query_host)
        if host is None:
            logger.warning("Host information unavailable, using placeholder")
            return HostInfo.placeholder()
        return host

    def _query_cpu(self) -> CpuInfo:
        # Blocks for the whole observation window
        usage = psutil.cpu_percent(interval=self._cpu_window)
        cores = psutil.cpu_count(logical=False) or psutil.cpu_count() or 0
        freq = psutil.cpu_freq()
        return CpuInfo(
            model=_cpu_model(),
            core_count=cores,
            clock_mhz=freq.current if freq else 0.0,
            usage_percent=usage,
        )

    def _query_memory(self) -> MemoryInfo:
        mem = psutil.virtual_memory()
        return MemoryInfo(
            total_bytes=mem.total,
            available_bytes=mem.available,
            used_bytes=mem.used,
            used_percent=mem.percent,
            cached_bytes=getattr(mem, "cached", 0),
            buffers_bytes=getattr(mem, "buffers", 0),
        )

    def _query_disk(self) -> DiskInfo:
        usage = psutil.disk_usage(self._root_path)
        return DiskInfo(
            mount_path=self._root_path,
            filesystem=_query("filesystem", self._filesystem_type) or "",
            total_bytes=usage.total,
            free_bytes=usage.free,
            used_bytes=usage.used,
            used_percent=usage.percent,
        )

    def _filesystem_type(self) -> str:
        for part in psutil.disk_partitions(all=True):
            if part.mountpoint == self._root_path:
                return part.fstype
        return ""

    def _query_network(self) -> tuple[NetworkInterface, ...]:
        counters = psutil.net_io_counters(pernic=True)
        return tuple(
            NetworkInterface(
                interface_name=name,
                bytes_sent=stats.bytes_sent,
                bytes_recv=stats.bytes_recv,
                packets_sent=stats.packets_sent,
                packets_recv=stats.packets_recv,
            )
            for name, stats in counters.items()
        )

    def _query_load(self) -> LoadAverage:
        load1, load5, load15 = psutil.getloadavg()
        return LoadAverage(load1=load1, load5=load5, load15=load15)

    def _query_processes(self) -> tuple[ProcessInfo, ...]:
        """
        Collect every running process in the order the OS returns them.

        Handles NoSuchProcess, AccessDenied and ZombieProcess by skipping
        the affected process.
        """
        processes: list[ProcessInfo] = []

        for proc in psutil.process_iter(attrs=["pid", "name", "cpu_percent", "memory_info"]):
            try:
                info = proc.info
                mem_info = info.get("memory_info")
                processes.append(
                    ProcessInfo(
                        name=info.get("name") or "",
                        pid=info.get("pid", 0),
                        cpu_percent=info.get("cpu_percent") or 0.0,
                        resident_memory_bytes=mem_info.rss if mem_info else 0,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        return tuple(processes)

    def _query_host(self) -> HostInfo:
        name, version = _platform_identity()
        return HostInfo(
            hostname=socket.gethostname(),
            platform=name,
            platform_version=version,
            uptime_seconds=max(0, int(time.time() - psutil.boot_time())),
        )


class SamplingWorker:
    """
    Runs sampling rounds off the UI thread.

    Each round runs in its own daemon thread and hands the finished
    snapshot to a delivery callback. A round always runs to completion;
    there is no cancellation.
    """

    def __init__(self, sampler: Sampler) -> None:
        self._sampler = sampler
        self._thread: threading.Thread | None = None
        # Set once a round's snapshot is ready, before it is delivered
        self._idle = threading.Event()
        self._idle.set()

    @property
    def sampler(self) -> Sampler:
        return self._sampler

    @property
    def is_running(self) -> bool:
        """Check if a round is currently sampling."""
        return not self._idle.is_set()

    def start_round(self, deliver: Callable[[MetricSnapshot], None]) -> bool:
        """
        Start one sampling round.

        Args:
            deliver: Called from the worker thread with the finished snapshot.

        Returns:
            False if a round is already running and nothing was started.
        """
        if self.is_running:
            logger.warning("Sampling round already in flight, not starting another")
            return False

        self._idle.clear()
        self._thread = threading.Thread(
            target=self._run,
            args=(deliver,),
            daemon=True,
            name="Sampler",
        )
        self._thread.start()
        return True

    def join(self, timeout: float | None = None) -> None:
        """Wait for the current round, if any, to finish."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self, deliver: Callable[[MetricSnapshot], None]) -> None:
        try:
            snapshot = self._sampler.sample()
        except Exception:
            # An empty snapshot still completes the round so the scheduler re-arms
            logger.exception("Sampling round failed")
            snapshot = MetricSnapshot()
        finally:
            self._idle.set()
        deliver(snapshot)
