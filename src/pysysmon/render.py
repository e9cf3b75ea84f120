"""Frame rendering for pysysmon.

Everything here is a pure function of DashboardState. Frames are Rich
markup strings; the app parses them with Rich before painting them into a
single Static widget, so the markup never goes through Textual's own parser.
"""

import math
import time
from collections.abc import Callable

from rich.markup import escape

from pysysmon.models import MetricSnapshot
from pysysmon.state import DashboardState, Tab

BAR_WIDTH = 20
BAR_FILL = "█"
BAR_EMPTY = "░"
MAX_PROCESS_ROWS = 10
TITLE = "System Monitor TUI"

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")

# Styles
HEADER = "bold #00afff"
VALUE = "#ffffff"
DIM = "#585858"
ACTIVE_TAB = "bold #ff87d7 on #303030"
CPU = "#00ff00"
MEM = "#ff0000"
DISK = "#ff8700"
NET = "#0087ff"
PROC = "#af87ff"


def format_bytes(size: int | float) -> str:
    """Format a byte count using 1024-based units with one decimal place."""
    size = max(0, int(size))
    if size < 1024:
        return f"{size} B"
    value = float(size)
    exp = 0
    while value >= 1024 and exp < len(_UNITS) - 1:
        value /= 1024
        exp += 1
    return f"{value:.1f} {_UNITS[exp]}"


def format_uptime(seconds: int | float) -> str:
    """Format uptime as whole hours and minutes; seconds are truncated."""
    total = max(0, int(seconds))
    return f"{total // 3600}h {(total % 3600) // 60}m"


def gauge_cells(percent: float, width: int = BAR_WIDTH) -> int:
    """Number of filled cells for a percentage, clamped to [0, width]."""
    if math.isnan(percent):
        return 0
    if math.isinf(percent):
        return width if percent > 0 else 0
    filled = math.floor(percent * width / 100)
    return max(0, min(filled, width))


def gauge(percent: float, width: int = BAR_WIDTH) -> str:
    """Plain two-glyph bar gauge."""
    filled = gauge_cells(percent, width)
    return BAR_FILL * filled + BAR_EMPTY * (width - filled)


def _styled(style: str, text: str) -> str:
    return f"[{style}]{escape(text)}[/]"


def _loading(what: str) -> str:
    return _styled(VALUE, f"Loading {what} information…")


def _row(*cells: str) -> str:
    return "  ".join(cells)


def _or_dash(value: str) -> str:
    return value or "-"


def render_tab_bar(active: Tab) -> str:
    """Render the tab row, highlighting the active tab."""
    cells = []
    for tab in Tab:
        style = ACTIVE_TAB if tab is active else DIM
        cells.append(_styled(style, f" {tab.title} "))
    return "".join(cells)


def render_system_tab(state: DashboardState) -> str:
    host = state.host
    snapshot = state.latest
    if snapshot is not None and snapshot.load is not None:
        load = snapshot.load
        load_line = f"Load Avg: {load.load1:.2f} {load.load5:.2f} {load.load15:.2f}"
    else:
        load_line = "Load Avg: Loading…"

    os_name = " ".join(part for part in (host.platform, host.platform_version) if part)
    return "\n".join(
        [
            _styled(HEADER, "System Information"),
            "",
            _row(
                _styled(VALUE, f"Hostname: {_or_dash(host.hostname)}"),
                _styled(VALUE, f"Platform: {_or_dash(host.platform)}"),
            ),
            "",
            _row(
                _styled(VALUE, f"OS: {_or_dash(os_name)}"),
                _styled(VALUE, f"Uptime: {format_uptime(host.uptime_seconds)}"),
            ),
            "",
            _styled(VALUE, load_line),
        ]
    )


def render_cpu_tab(snapshot: MetricSnapshot | None) -> str:
    if snapshot is None or snapshot.cpu is None:
        return _loading("CPU")

    cpu = snapshot.cpu
    return "\n".join(
        [
            _styled(HEADER, "CPU Information"),
            "",
            _styled(VALUE, f"Model: {cpu.model}"),
            "",
            _row(
                _styled(VALUE, f"Cores: {cpu.core_count}"),
                _styled(VALUE, f"Mhz: {cpu.clock_mhz:.0f}"),
            ),
            "",
            _row(
                _styled(VALUE, f"Usage: {cpu.usage_percent:.1f}%"),
                _styled(CPU, gauge(cpu.usage_percent)),
            ),
        ]
    )


def render_memory_tab(snapshot: MetricSnapshot | None) -> str:
    if snapshot is None or snapshot.memory is None:
        return _loading("memory")

    mem = snapshot.memory
    return "\n".join(
        [
            _styled(HEADER, "Memory Information"),
            "",
            _row(
                _styled(VALUE, f"Total: {format_bytes(mem.total_bytes)}"),
                _styled(VALUE, f"Available: {format_bytes(mem.available_bytes)}"),
            ),
            "",
            _styled(VALUE, f"Used: {format_bytes(mem.used_bytes)} ({mem.used_percent:.1f}%)"),
            "",
            _styled(MEM, gauge(mem.used_percent)),
            "",
            _row(
                _styled(VALUE, f"Cached: {format_bytes(mem.cached_bytes)}"),
                _styled(VALUE, f"Buffers: {format_bytes(mem.buffers_bytes)}"),
            ),
        ]
    )


def render_disk_tab(snapshot: MetricSnapshot | None) -> str:
    if snapshot is None or snapshot.disk is None:
        return _loading("disk")

    disk = snapshot.disk
    return "\n".join(
        [
            _styled(HEADER, "Disk Information"),
            "",
            _row(
                _styled(VALUE, f"Mountpoint: {disk.mount_path}"),
                _styled(VALUE, f"Filesystem: {_or_dash(disk.filesystem)}"),
            ),
            "",
            _row(
                _styled(VALUE, f"Total: {format_bytes(disk.total_bytes)}"),
                _styled(VALUE, f"Free: {format_bytes(disk.free_bytes)}"),
            ),
            "",
            _styled(VALUE, f"Used: {format_bytes(disk.used_bytes)} ({disk.used_percent:.1f}%)"),
            "",
            _styled(DISK, gauge(disk.used_percent)),
        ]
    )


def render_network_tab(snapshot: MetricSnapshot | None) -> str:
    if snapshot is None or not snapshot.network:
        return _loading("network")

    lines = [_styled(HEADER, "Network Information")]
    for nic in snapshot.network:
        lines.extend(
            [
                "",
                _styled(NET, f"Interface: {nic.interface_name}"),
                _row(
                    _styled(VALUE, f"Bytes Sent: {format_bytes(nic.bytes_sent)}"),
                    _styled(VALUE, f"Bytes Recv: {format_bytes(nic.bytes_recv)}"),
                ),
                _row(
                    _styled(VALUE, f"Packets Sent: {nic.packets_sent}"),
                    _styled(VALUE, f"Packets Recv: {nic.packets_recv}"),
                ),
            ]
        )
    return "\n".join(lines)


def render_processes_tab(snapshot: MetricSnapshot | None) -> str:
    """List the first processes in collection order. No sorting is applied."""
    if snapshot is None or not snapshot.processes:
        return _loading("process")

    shown = snapshot.processes[:MAX_PROCESS_ROWS]
    lines = [_styled(HEADER, f"Top {len(shown)} Processes"), ""]
    for proc in shown:
        lines.append(
            _row(
                _styled(PROC, f"{proc.name} [{proc.pid}]"),
                _styled(CPU, f"CPU: {proc.cpu_percent:.1f}%"),
                _styled(MEM, f"Mem: {format_bytes(proc.resident_memory_bytes)}"),
            )
        )
    return "\n".join(lines)


_SNAPSHOT_RENDERERS: dict[Tab, Callable[[MetricSnapshot | None], str]] = {
    Tab.CPU: render_cpu_tab,
    Tab.MEMORY: render_memory_tab,
    Tab.DISK: render_disk_tab,
    Tab.NETWORK: render_network_tab,
    Tab.PROCESSES: render_processes_tab,
}


def render_tab_content(state: DashboardState) -> str:
    """Select and render the active tab's body."""
    tab = state.active_tab
    if tab is Tab.SYSTEM:
        return render_system_tab(state)
    return _SNAPSHOT_RENDERERS[tab](state.latest)


def render(state: DashboardState) -> str:
    """Render a complete frame for the current state."""
    lines = [_styled(HEADER, TITLE)]
    if state.latest is not None and state.latest.taken_at:
        updated = time.strftime("%H:%M:%S", time.localtime(state.latest.taken_at))
        lines.append(_styled(DIM, f"Updated {updated}"))
    lines.extend(["", render_tab_bar(state.active_tab), "", render_tab_content(state)])
    return "\n".join(lines)
