"""Authoritative dashboard state, owned by the controller."""

from dataclasses import dataclass, field
from enum import IntEnum

from pysysmon.models import HostInfo, MetricSnapshot


class Tab(IntEnum):
    """The six dashboard views, in display order."""

    SYSTEM = 0
    CPU = 1
    MEMORY = 2
    DISK = 3
    NETWORK = 4
    PROCESSES = 5

    @property
    def title(self) -> str:
        return "CPU" if self is Tab.CPU else self.name.capitalize()


TAB_COUNT = len(Tab)


@dataclass(slots=True)
class DashboardState:
    """
    Mutable view state.

    `latest` is None until the first sampling round lands (Initializing).
    Once `quitting` is set every mutator becomes a no-op.
    """

    host: HostInfo = field(default_factory=HostInfo.placeholder)
    active_tab_index: int = 0
    latest: MetricSnapshot | None = None
    quitting: bool = False

    @property
    def active_tab(self) -> Tab:
        return Tab(self.active_tab_index % TAB_COUNT)

    @property
    def initializing(self) -> bool:
        return self.latest is None

    def next_tab(self) -> bool:
        if self.quitting:
            return False
        self.active_tab_index = (self.active_tab_index + 1) % TAB_COUNT
        return True

    def prev_tab(self) -> bool:
        if self.quitting:
            return False
        self.active_tab_index = (self.active_tab_index - 1 + TAB_COUNT) % TAB_COUNT
        return True

    def apply_snapshot(self, snapshot: MetricSnapshot) -> bool:
        """Replace the latest snapshot (last writer wins)."""
        if self.quitting:
            return False
        self.latest = snapshot
        return True

    def quit(self) -> bool:
        """Set the quit flag. Returns False if it was already set."""
        if self.quitting:
            return False
        self.quitting = True
        return True
