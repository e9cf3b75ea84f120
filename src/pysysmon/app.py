"""pysysmon - Main Textual application."""

import logging
import sys

from rich.text import Text

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Footer, Static

from pysysmon.controller import DashboardController
from pysysmon.logs import setup_logging
from pysysmon.models import MetricSnapshot
from pysysmon.render import render
from pysysmon.router import KEYMAP, Action, InputRouter
from pysysmon.sampler import Sampler, SamplingWorker
from pysysmon.scheduler import REFRESH_INTERVAL, RefreshScheduler
from pysysmon.state import DashboardState

logger = logging.getLogger(__name__)

FAREWELL = "Thanks for using pysysmon!"

_DESCRIPTIONS = {
    Action.QUIT: "Quit",
    Action.NEXT_TAB: "Next tab",
    Action.PREV_TAB: "Prev tab",
    Action.MANUAL_REFRESH: "Refresh",
}

_KEY_DISPLAY = {"right": "→", "left": "←"}


def _bindings() -> list[Binding]:
    """One priority binding per routed key; the first key of each action is shown in the footer."""
    bindings = []
    shown: set[Action] = set()
    for key, action in KEYMAP.items():
        bindings.append(
            Binding(
                key,
                f"route('{key}')",
                _DESCRIPTIONS.get(action, ""),
                show=action not in shown,
                key_display=_KEY_DISPLAY.get(key),
                priority=True,
            )
        )
        shown.add(action)
    return bindings


class SampleCompleted(Message):
    """Posted from the sampling thread when a round finishes."""

    def __init__(self, snapshot: MetricSnapshot) -> None:
        super().__init__()
        self.snapshot = snapshot


class SysmonApp(App):
    """Main pysysmon application."""

    TITLE = "pysysmon"
    SUB_TITLE = "Python System Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #frame {
        width: 80;
        height: auto;
        border: solid $primary;
        padding: 0 1;
    }
    """

    BINDINGS = _bindings()

    def __init__(
        self,
        sampler: Sampler | None = None,
        refresh_interval: float = REFRESH_INTERVAL,
    ) -> None:
        """
        Initialize the SysmonApp.

        Args:
            sampler: Metric sampler; a psutil-backed Sampler by default.
            refresh_interval: Seconds between a round finishing and the next
                periodic round.
        """
        super().__init__()
        self._router = InputRouter()
        self._worker = SamplingWorker(sampler or Sampler())
        # Host identity is queried once, synchronously, and never refreshed
        self._state = DashboardState(host=self._worker.sampler.query_host())
        self._scheduler = RefreshScheduler(
            self._start_round,
            self.set_timer,
            interval=refresh_interval,
        )
        self._controller = DashboardController(self._state, self._scheduler)

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def controller(self) -> DashboardController:
        return self._controller

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(self._frame(), id="frame")
        yield Footer()

    def on_mount(self) -> None:
        """Request the startup sampling round once the app is mounted."""
        logger.info("Starting dashboard on %s", self._state.host.hostname or "unknown host")
        self._controller.start()

    def on_sample_completed(self, message: SampleCompleted) -> None:
        """Merge a finished round into state and redraw."""
        if self._controller.handle_snapshot(message.snapshot):
            self._refresh_frame()

    def action_route(self, key: str) -> None:
        """Handle a bound key press."""
        action = self._router.route(key)
        changed = self._controller.handle_action(action)
        if self._state.quitting:
            self.exit(message=FAREWELL)
            return
        if changed:
            self._refresh_frame()

    def _start_round(self) -> None:
        self._worker.start_round(self._deliver)

    def _deliver(self, snapshot: MetricSnapshot) -> None:
        # Runs on the sampling thread; post_message is thread-safe
        self.post_message(SampleCompleted(snapshot))

    def _frame(self) -> Text:
        return Text.from_markup(render(self._state))

    def _refresh_frame(self) -> None:
        self.query_one("#frame", Static).update(self._frame())


def main() -> None:
    """Entry point for pysysmon application."""
    setup_logging()
    app = SysmonApp()
    try:
        app.run()
    except Exception as exc:
        logger.error("Terminal runtime failed", exc_info=True)
        print(f"Error: {exc}")
        sys.exit(1)
    if app.return_code:
        # Textual catches errors raised inside the app and records them
        # instead of re-raising from run()
        exc = getattr(app, "_exception", None)
        message = str(exc) if exc is not None else f"terminal runtime exited with code {app.return_code}"
        logger.error("Terminal runtime failed: %s", message)
        print(f"Error: {message}")
        sys.exit(app.return_code)


if __name__ == "__main__":
    main()
