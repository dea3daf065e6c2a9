from wpprovisioner.models import ServiceStatus
from wpprovisioner.services.monitor import StatusMonitor


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def __init__(self):
        self.lines = []

    def print(self, line, *_args, **_kwargs):
        self.lines.append(line)


class FakeServiceManager:
    def status(self, unit):
        return ServiceStatus(unit=unit, state="active")


def _monitor(duration, interval=0.01, console=None):
    return StatusMonitor(
        logger=DummyLogger(),
        console=console or DummyConsole(),
        service_manager=FakeServiceManager(),
        units=["mariadb", "caddy"],
        duration_seconds=duration,
        interval_seconds=interval,
    )


def test_monitor_polls_for_bounded_duration():
    monitor = _monitor(duration=0.05, interval=0.01)

    monitor.start()
    monitor.wait()

    assert 1 <= monitor.polls <= 6


def test_monitor_stops_when_cancelled():
    monitor = _monitor(duration=60, interval=30)

    monitor.start()
    monitor.stop()

    assert monitor.polls <= 1
    assert not monitor._thread.is_alive()


def test_monitor_disabled_with_zero_duration():
    monitor = _monitor(duration=0)

    monitor.start()
    monitor.wait()

    assert monitor.polls == 0


def test_poll_once_reports_each_unit():
    console = DummyConsole()
    monitor = _monitor(duration=1, console=console)

    statuses = monitor.poll_once()

    assert [status.unit for status in statuses] == ["mariadb", "caddy"]
    assert "mariadb" in console.lines[0]
    assert "caddy" in console.lines[0]


def test_wait_stops_monitor_on_keyboard_interrupt(monkeypatch):
    console = DummyConsole()
    monitor = _monitor(duration=60, interval=30, console=console)
    monitor.start()
    real_join = monitor._thread.join

    def join(timeout=None):
        if timeout is not None:
            raise KeyboardInterrupt
        return real_join()

    monkeypatch.setattr(monitor._thread, "join", join)

    monitor.wait()

    assert not monitor._thread.is_alive()
    assert "[dim]Status monitor stopped.[/dim]" in console.lines
