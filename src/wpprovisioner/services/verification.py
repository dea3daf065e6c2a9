"""Post-install health checks for wpprovisioner."""

from typing import List

import requests

from wpprovisioner.constants import CADDY_UNIT, DATABASE_UNIT
from wpprovisioner.models import VerificationReport


class VerificationService:
    """Checks managed services and probes the site once over HTTP."""

    def __init__(self, logger, console, service_manager, requests_module=requests, http_timeout: float = 15.0):
        self.logger = logger
        self.console = console
        self.service_manager = service_manager
        self.requests = requests_module
        self.http_timeout = http_timeout

    @staticmethod
    def managed_units(run_context) -> List[str]:
        return [DATABASE_UNIT, run_context.php_fpm_unit or "php-fpm", CADDY_UNIT]

    def probe(self, url: str):
        """Returns ``(status_code, error)``; redirects are reported, not followed."""
        try:
            response = self.requests.get(url, allow_redirects=False, timeout=self.http_timeout)
        except self.requests.RequestException as exc:
            return None, str(exc)

        try:
            return response.status_code, None
        finally:
            response.close()

    def verify(self, run_context) -> VerificationReport:
        self.console.print("[blue]Verifying services...[/blue]")
        statuses = [self.service_manager.status(unit) for unit in self.managed_units(run_context)]
        for status in statuses:
            self.logger.info("Service %s: %s", status.unit, status.state)

        url = f"http://{run_context.server_ip or run_context.domain}/"
        http_status, http_error = self.probe(url)
        if http_error:
            self.logger.warning("HTTP probe of %s failed: %s", url, http_error)
        else:
            self.logger.info("HTTP probe of %s returned %s", url, http_status)

        return VerificationReport(
            services=statuses,
            url=url,
            http_status=http_status,
            http_error=http_error,
        )
