"""Optional background status reporter shown after provisioning."""

import threading
from typing import Iterable, Optional


class StatusMonitor:
    """Polls service status on a background thread for a bounded duration."""

    def __init__(
        self,
        logger,
        console,
        service_manager,
        units: Iterable[str],
        duration_seconds: float,
        interval_seconds: float = 10.0,
    ):
        self.logger = logger
        self.console = console
        self.service_manager = service_manager
        self.units = list(units)
        self.duration_seconds = max(0.0, duration_seconds)
        self.interval_seconds = max(0.1, interval_seconds)
        self.polls = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        if self._thread is not None or self.duration_seconds <= 0:
            return

        self._thread = threading.Thread(target=self._loop, name="wpprovisioner-monitor", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()

    def wait(self):
        """Blocks until the monitor finishes; Ctrl+C cancels it."""
        if self._thread is None:
            return
        try:
            while self._thread.is_alive():
                self._thread.join(timeout=0.5)
        except KeyboardInterrupt:
            self.console.print("[dim]Status monitor stopped.[/dim]")
            self.stop()

    def poll_once(self):
        statuses = [self.service_manager.status(unit) for unit in self.units]
        line = "  ".join(
            f"{status.unit}: [{'green' if status.running else 'red'}]{status.state}[/]"
            for status in statuses
        )
        self.console.print(line)
        self.logger.debug("Monitor poll: %s", ", ".join(f"{s.unit}={s.state}" for s in statuses))
        self.polls += 1
        return statuses

    def _loop(self):
        remaining = self.duration_seconds
        while not self._stop_event.is_set() and remaining > 0:
            try:
                self.poll_once()
            except Exception as exc:
                self.logger.warning("Status monitor poll failed: %s", exc)
            wait_for = min(self.interval_seconds, remaining)
            remaining -= wait_for
            if self._stop_event.wait(wait_for):
                break
