"""Data models for pysysmon."""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class CpuInfo:
    """CPU identity plus utilization over the sampling window."""

    model: str
    core_count: int
    clock_mhz: float
    usage_percent: float


@dataclass(slots=True, frozen=True)
class MemoryInfo:
    """Virtual memory statistics."""

    total_bytes: int
    available_bytes: int
    used_bytes: int
    used_percent: float
    cached_bytes: int = 0  # Linux only
    buffers_bytes: int = 0  # Linux only


@dataclass(slots=True, frozen=True)
class DiskInfo:
    """Usage of a single mounted filesystem."""

    mount_path: str
    filesystem: str
    total_bytes: int
    free_bytes: int
    used_bytes: int
    used_percent: float


@dataclass(slots=True, frozen=True)
class NetworkInterface:
    """Cumulative counters for one network interface."""

    interface_name: str
    bytes_sent: int
    bytes_recv: int
    packets_sent: int
    packets_recv: int


@dataclass(slots=True, frozen=True)
class LoadAverage:
    """1, 5 and 15 minute load averages."""

    load1: float
    load5: float
    load15: float


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    """Immutable snapshot of a process state."""

    name: str
    pid: int
    cpu_percent: float
    resident_memory_bytes: int


@dataclass(slots=True, frozen=True)
class HostInfo:
    """Host identity, sampled once at startup."""

    hostname: str
    platform: str
    platform_version: str
    uptime_seconds: int

    @classmethod
    def placeholder(cls) -> "HostInfo":
        """Empty host record used when the startup query fails."""
        return cls(hostname="", platform="", platform_version="", uptime_seconds=0)


@dataclass(slots=True, frozen=True)
class MetricSnapshot:
    """
    Result of one sampling round.

    Optional fields are None when their query failed during the round.
    Processes keep the full list in collection order; truncation happens
    at render time.
    """

    cpu: CpuInfo | None = None
    memory: MemoryInfo | None = None
    disk: DiskInfo | None = None
    network: tuple[NetworkInterface, ...] = ()
    load: LoadAverage | None = None
    processes: tuple[ProcessInfo, ...] = ()
    taken_at: float = field(default=0.0, compare=False)
