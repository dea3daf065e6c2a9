"""UFW firewall configuration for wpprovisioner."""

from typing import Callable, Iterable

from wpprovisioner.constants import FIREWALL_RULES


class FirewallService:
    """Opens SSH and web ports, then turns the firewall on."""

    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    def configure(self, rules: Iterable[str] = FIREWALL_RULES) -> str:
        self.console.print("[blue]Configuring UFW firewall...[/blue]")
        # rules go in before enabling so an SSH session survives
        for rule in rules:
            self.run_cmd(["ufw", "allow", rule])
        self.run_cmd(["ufw", "--force", "enable"])
        self.run_cmd(["ufw", "reload"])

        status = self.run_cmd(["ufw", "status"], capture_output=True).stdout or ""
        self.logger.info("Firewall status:\n%s", status.strip())
        return status
