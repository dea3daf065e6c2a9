"""Service manager helpers for wpprovisioner."""

from typing import Callable

from wpprovisioner.models import ServiceStatus


class ServiceManager:
    """Drives systemd units through systemctl."""

    def __init__(self, logger, run_cmd: Callable):
        self.logger = logger
        self.run_cmd = run_cmd

    def enable(self, unit: str):
        self.run_cmd(["systemctl", "enable", unit])

    def start(self, unit: str):
        self.run_cmd(["systemctl", "start", unit])

    def restart(self, unit: str):
        self.logger.info("Restarting %s", unit)
        self.run_cmd(["systemctl", "restart", unit])

    def enable_and_start(self, unit: str):
        self.logger.info("Enabling and starting %s", unit)
        self.enable(unit)
        self.start(unit)

    def status(self, unit: str) -> ServiceStatus:
        # is-active exits non-zero for anything but "active"
        result = self.run_cmd(["systemctl", "is-active", unit], check=False, capture_output=True)
        state = (result.stdout or "").strip().splitlines()
        return ServiceStatus(unit=unit, state=state[0] if state else "unknown")

    def is_active(self, unit: str) -> bool:
        return self.status(unit).running
