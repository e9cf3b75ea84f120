"""Tests for pysysmon application."""

from unittest.mock import patch

import pytest

from conftest import FakeSampler, make_processes, make_snapshot
from pysysmon.app import SampleCompleted, SysmonApp, main
from pysysmon.models import ProcessInfo
from pysysmon.render import render
from pysysmon.state import Tab


async def wait_for_snapshot(pilot, app: SysmonApp, timeout: float = 3.0) -> None:
    """Pause the pilot until the in-flight round has landed."""
    waited = 0.0
    while app.scheduler.in_flight and waited < timeout:
        await pilot.pause(0.05)
        waited += 0.05


@pytest.mark.asyncio
async def test_app_creation():
    """Test SysmonApp can be instantiated."""
    app = SysmonApp(sampler=FakeSampler())
    assert app.title == "pysysmon"
    assert app.sub_title == "Python System Monitor"


@pytest.mark.asyncio
async def test_host_queried_at_construction():
    """Test host identity is populated before the first round."""
    app = SysmonApp(sampler=FakeSampler())

    assert app.state.host.hostname == "testbox"
    assert app.state.latest is None


@pytest.mark.asyncio
async def test_app_compose():
    """Test SysmonApp composes the frame."""
    app = SysmonApp(sampler=FakeSampler())
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#frame") is not None


@pytest.mark.asyncio
async def test_startup_round_lands():
    """Test the startup round is sampled and merged into state."""
    sampler = FakeSampler()
    app = SysmonApp(sampler=sampler)
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)

        assert app.state.latest == sampler.snapshot
        assert app.scheduler.rounds_started >= 1
        assert app.scheduler.timer_armed


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' triggers quit."""
    app = SysmonApp(sampler=FakeSampler())
    async with app.run_test() as pilot:
        await pilot.press("q")
        # App should be exiting
        assert pilot.app._exit
        assert app.state.quitting
        assert app.scheduler.stopped


@pytest.mark.asyncio
async def test_ctrl_c_quits():
    """Test that ctrl+c triggers quit."""
    app = SysmonApp(sampler=FakeSampler())
    async with app.run_test() as pilot:
        await pilot.press("ctrl+c")
        assert app.state.quitting


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("keys", "expected"),
    [
        (["right"], Tab.CPU),
        (["l", "l"], Tab.MEMORY),
        (["tab", "tab", "tab"], Tab.DISK),
        (["left"], Tab.PROCESSES),
        (["h", "h"], Tab.NETWORK),
        (["shift+tab"], Tab.PROCESSES),
        (["right", "left"], Tab.SYSTEM),
        (["x", "enter"], Tab.SYSTEM),
    ],
)
async def test_tab_navigation(keys, expected):
    """Test navigation keys move between tabs with wraparound."""
    app = SysmonApp(sampler=FakeSampler())
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)
        for key in keys:
            await pilot.press(key)
            await wait_for_snapshot(pilot, app)

        assert app.state.active_tab is expected


@pytest.mark.asyncio
async def test_tab_change_triggers_refresh():
    """Test switching tabs samples again."""
    sampler = FakeSampler()
    app = SysmonApp(sampler=sampler)
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)
        before = app.scheduler.rounds_started

        await pilot.press("right")
        await wait_for_snapshot(pilot, app)

        assert app.scheduler.rounds_started == before + 1
        assert sampler.calls == before + 1


@pytest.mark.asyncio
async def test_manual_refresh_keeps_tab():
    """Test 'r' samples again without changing tab."""
    app = SysmonApp(sampler=FakeSampler())
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)
        before = app.scheduler.rounds_started

        await pilot.press("r")
        await wait_for_snapshot(pilot, app)

        assert app.scheduler.rounds_started == before + 1
        assert app.state.active_tab is Tab.SYSTEM


@pytest.mark.asyncio
async def test_refresh_during_round_is_deferred():
    """Test a refresh while sampling does not start a second concurrent round."""
    sampler = FakeSampler()
    sampler.release.clear()
    app = SysmonApp(sampler=sampler)
    async with app.run_test() as pilot:
        await pilot.pause(0.1)
        assert app.scheduler.in_flight

        await pilot.press("r")
        assert app.scheduler.rounds_started == 1
        assert app.scheduler.pending

        sampler.release.set()
        await pilot.pause(0.2)
        await wait_for_snapshot(pilot, app)

        assert app.scheduler.rounds_started == 2
        assert sampler.calls == 2


@pytest.mark.asyncio
async def test_periodic_refresh():
    """Test the periodic timer re-samples after each round completes."""
    sampler = FakeSampler()
    app = SysmonApp(sampler=sampler, refresh_interval=0.1)
    async with app.run_test() as pilot:
        await pilot.pause(0.6)

        assert sampler.calls >= 3


@pytest.mark.asyncio
async def test_snapshot_message_updates_frame_state():
    """Test a SampleCompleted message is merged by the controller."""
    sampler = FakeSampler()
    app = SysmonApp(sampler=sampler)
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)
        replacement = make_snapshot(disk=None)

        app.post_message(SampleCompleted(replacement))
        await pilot.pause(0.1)

        assert app.state.latest == replacement


@pytest.mark.asyncio
async def test_end_to_end_system_and_processes():
    """Test the System tab is populated and the Processes tab shows at most ten rows."""
    sampler = FakeSampler(snapshot=make_snapshot(processes=make_processes(25)))
    app = SysmonApp(sampler=sampler)
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)

        system = render(app.state)
        assert "Hostname: testbox" in system
        assert "Uptime: 1h 1m" in system
        assert "Load Avg: 0.52 0.41 0.30" in system

        await pilot.press("left")
        await wait_for_snapshot(pilot, app)

        assert app.state.active_tab is Tab.PROCESSES
        frame = render(app.state)
        assert frame.count("CPU: ") == 10
        assert frame.index("proc0 ") < frame.index("proc9 ")


@pytest.mark.asyncio
async def test_end_to_end_disk_failure():
    """Test the Disk tab shows a placeholder when the disk query failed."""
    sampler = FakeSampler(snapshot=make_snapshot(disk=None))
    app = SysmonApp(sampler=sampler)
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)
        for _ in range(3):
            await pilot.press("right")
            await wait_for_snapshot(pilot, app)

        assert app.state.active_tab is Tab.DISK
        assert "Loading disk information…" in render(app.state)


class _CrashingApp:
    return_code = None

    def run(self):
        raise OSError("terminal went away")


class _FailedApp:
    return_code = 1

    def run(self):
        return None


class _CleanApp:
    return_code = 0

    def run(self):
        return None


class _BrokenComposeApp(SysmonApp):
    """Real app whose layout fails; Textual records the error instead of raising it."""

    def __init__(self):
        super().__init__(sampler=FakeSampler())

    def compose(self):
        raise RuntimeError("terminal went away")

    def run(self):
        return super().run(headless=True)


def test_main_fatal_error_exits_one(capsys):
    """Test a terminal runtime failure prints the error and exits 1."""
    with patch("pysysmon.app.SysmonApp", _CrashingApp), patch("pysysmon.app.setup_logging"):
        with pytest.raises(SystemExit) as excinfo:
            main()

    assert excinfo.value.code == 1
    assert "Error: terminal went away" in capsys.readouterr().out


def test_main_reports_error_recorded_by_textual(capsys):
    """Test an error caught inside the running app is printed before exiting 1."""
    with patch("pysysmon.app.SysmonApp", _BrokenComposeApp), patch("pysysmon.app.setup_logging"):
        with pytest.raises(SystemExit) as excinfo:
            main()

    assert excinfo.value.code == 1
    assert "Error: terminal went away" in capsys.readouterr().out


def test_main_propagates_runtime_return_code(capsys):
    """Test a non-zero return code reported by Textual becomes the exit code."""
    with patch("pysysmon.app.SysmonApp", _FailedApp), patch("pysysmon.app.setup_logging"):
        with pytest.raises(SystemExit) as excinfo:
            main()

    assert excinfo.value.code == 1
    assert "Error: terminal runtime exited with code 1" in capsys.readouterr().out


def test_main_normal_quit_returns(capsys):
    """Test a normal quit returns without raising SystemExit."""
    with patch("pysysmon.app.SysmonApp", _CleanApp), patch("pysysmon.app.setup_logging"):
        main()

    assert "Error" not in capsys.readouterr().out


@pytest.mark.asyncio
async def test_every_tab_paints_with_bracketed_process_names():
    """Test frames with markup-like process names paint on every tab without crashing."""
    evil = ProcessInfo(name="[bold]evil", pid=7, cpu_percent=1.0, resident_memory_bytes=2048)
    app = SysmonApp(sampler=FakeSampler(snapshot=make_snapshot(processes=(evil,))))
    async with app.run_test() as pilot:
        await wait_for_snapshot(pilot, app)
        for _ in Tab:
            await pilot.press("right")
            await wait_for_snapshot(pilot, app)

        assert app.state.active_tab is Tab.SYSTEM
        assert app.return_code is None
