"""Refresh cadence for pysysmon sampling rounds."""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 2.0


class TriggerReason(Enum):
    """Why a sampling round was requested."""

    STARTUP = "startup"
    TAB_CHANGE = "tab-change"
    MANUAL = "manual"
    PERIODIC = "periodic"


class TimerHandle(Protocol):
    """Anything with a stop() method, such as a Textual Timer."""

    def stop(self) -> None: ...


class RefreshScheduler:
    """
    Decides when sampling rounds start.

    At most one round is in flight at any time. The periodic timer is
    armed only after a round completes, so slow sampling throttles itself
    instead of stacking rounds. A user trigger that arrives mid-round is
    remembered and starts one follow-up round as soon as the current one
    lands. Triggers are coalesced, not queued: any number of key presses
    during one round yield a single follow-up round, and their reasons
    collapse into MANUAL.
    """

    def __init__(
        self,
        start_round: Callable[[], None],
        set_timer: Callable[[float, Callable[[], None]], TimerHandle],
        interval: float = REFRESH_INTERVAL,
    ) -> None:
        """
        Initialize the RefreshScheduler.

        Args:
            start_round: Launches a sampling round in the background.
            set_timer: Schedules a one-shot callback after a delay and returns
                a handle that can cancel it.
            interval: Seconds between a round completing and the next
                periodic round starting.
        """
        self._start_round = start_round
        self._set_timer = set_timer
        self._interval = interval
        self._timer: TimerHandle | None = None
        self._in_flight = False
        self._pending = False
        self._stopped = False
        self._rounds_started = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def in_flight(self) -> bool:
        """True while a sampling round has started but not yet delivered."""
        return self._in_flight

    @property
    def pending(self) -> bool:
        """True if a follow-up round will start when the current one lands."""
        return self._pending

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def rounds_started(self) -> int:
        return self._rounds_started

    def start(self) -> None:
        """Kick off the startup round."""
        self.trigger(TriggerReason.STARTUP)

    def trigger(self, reason: TriggerReason) -> bool:
        """
        Request a sampling round.

        Returns:
            True if a round was started immediately.
        """
        if self._stopped:
            return False

        if self._in_flight:
            logger.debug("Round in flight, deferring %s refresh", reason.value)
            self._pending = True
            return False

        self._cancel_timer()
        self._begin(reason)
        return True

    def round_completed(self) -> None:
        """Record that the in-flight round delivered its snapshot."""
        self._in_flight = False
        if self._stopped:
            return

        self._cancel_timer()
        if self._pending:
            self._pending = False
            self._begin(TriggerReason.MANUAL)
            return

        self._timer = self._set_timer(self._interval, self._on_timer)

    def stop(self) -> None:
        """Stop scheduling. A round already in flight still runs to completion."""
        self._stopped = True
        self._pending = False
        self._cancel_timer()

    def _on_timer(self) -> None:
        self._timer = None
        self.trigger(TriggerReason.PERIODIC)

    def _begin(self, reason: TriggerReason) -> None:
        self._in_flight = True
        self._rounds_started += 1
        logger.debug("Starting sampling round #%d (%s)", self._rounds_started, reason.value)
        self._start_round()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
