"""APT package management for wpprovisioner."""

from typing import Callable, Iterable

import requests

from wpprovisioner.constants import FILE_MODE
from wpprovisioner.errors import StepExecutionError


class PackageService:
    """Wraps apt-get and repository registration."""

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        filesystem_service,
        validation_service,
        requests_module=requests,
        http_timeout: float = 30.0,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.filesystem_service = filesystem_service
        self.validation_service = validation_service
        self.requests = requests_module
        self.http_timeout = http_timeout

    def update(self):
        self.logger.info("Refreshing package index...")
        self.run_cmd(["apt-get", "update", "-y"])

    def install(self, packages: Iterable[str]):
        package_list = list(packages)
        if not package_list:
            return

        self.console.print(f"[blue]Installing {len(package_list)} package(s)...[/blue]")
        self.logger.info("Installing packages: %s", ", ".join(package_list))
        self.run_cmd(["apt-get", "install", "-y", "--no-install-recommends"] + package_list)

    def add_ppa(self, ppa: str):
        self.logger.info("Adding repository %s", ppa)
        self.run_cmd(["add-apt-repository", "-y", ppa])
        self.update()

    def add_apt_repository(self, name: str, key_url: str, keyring_path: str, sources_path: str, source_line: str):
        """Registers a signed third-party apt repository and refreshes the index."""
        self.logger.info("Adding %s apt repository", name)
        self.validation_service.enforce_https_policy(key_url, f"{name} signing key")

        try:
            response = self.requests.get(key_url, timeout=self.http_timeout)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            raise StepExecutionError(f"Could not download {name} signing key: {exc}") from exc

        self.run_cmd(
            ["gpg", "--batch", "--yes", "--dearmor", "-o", keyring_path],
            input_text=response.text,
        )
        self.filesystem_service.write_text(sources_path, source_line + "\n", FILE_MODE)
        self.update()
