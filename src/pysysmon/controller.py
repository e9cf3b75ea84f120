"""Controller loop state machine for pysysmon."""

import logging
from enum import Enum

from pysysmon.models import MetricSnapshot
from pysysmon.router import Action
from pysysmon.scheduler import RefreshScheduler, TriggerReason
from pysysmon.state import DashboardState

logger = logging.getLogger(__name__)


class ControllerPhase(Enum):
    RUNNING = "running"
    QUITTING = "quitting"


class DashboardController:
    """
    Sole writer of DashboardState.

    Every event (key action or finished sampling round) passes through
    one of the handle_* methods, which run on the UI event loop in arrival
    order. Each returns True when the state changed and a re-render is due.
    """

    def __init__(self, state: DashboardState, scheduler: RefreshScheduler) -> None:
        self._state = state
        self._scheduler = scheduler
        self._phase = ControllerPhase.RUNNING

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def phase(self) -> ControllerPhase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._phase is ControllerPhase.RUNNING

    def start(self) -> None:
        """Request the startup sampling round."""
        self._scheduler.start()

    def handle_action(self, action: Action) -> bool:
        """Apply a routed key action."""
        if not self.running:
            return False

        if action is Action.QUIT:
            self._state.quit()
            self._scheduler.stop()
            self._phase = ControllerPhase.QUITTING
            logger.info("Quit requested")
            return True

        if action is Action.NEXT_TAB:
            self._state.next_tab()
            self._scheduler.trigger(TriggerReason.TAB_CHANGE)
            return True

        if action is Action.PREV_TAB:
            self._state.prev_tab()
            self._scheduler.trigger(TriggerReason.TAB_CHANGE)
            return True

        if action is Action.MANUAL_REFRESH:
            self._scheduler.trigger(TriggerReason.MANUAL)
            return False

        return False

    def handle_snapshot(self, snapshot: MetricSnapshot) -> bool:
        """Merge a finished sampling round into state."""
        self._scheduler.round_completed()
        if not self.running:
            logger.debug("Discarding snapshot delivered after quit")
            return False
        return self._state.apply_snapshot(snapshot)
