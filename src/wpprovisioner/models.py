"""Shared domain models for wpprovisioner."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(frozen=True)
class GeneratedCredentials:
    """Secrets generated once per run and shown in the final summary."""

    db_root_password: str
    db_password: str


@dataclass(frozen=True)
class RunContext:
    """Host facts, paths and credentials isolated per execution."""

    run_id: str
    domain: str
    wp_dir: str
    log_file: str
    db_name: str
    db_user: str
    credentials: GeneratedCredentials
    server_ip: Optional[str] = None
    php_version: Optional[str] = None

    @property
    def php_fpm_unit(self) -> Optional[str]:
        if not self.php_version:
            return None
        return f"php{self.php_version}-fpm"

    @property
    def php_fpm_socket(self) -> Optional[str]:
        if not self.php_version:
            return None
        return f"/run/php/php{self.php_version}-fpm.sock"

    @property
    def site_urls(self) -> List[str]:
        urls = []
        if self.server_ip:
            urls.append(f"http://{self.server_ip}")
        if self.domain and self.domain != self.server_ip:
            urls.append(f"http://{self.domain}")
        return urls


@dataclass
class ProvisioningStep:
    name: str
    ordinal: int
    action: Callable[[], object]
    side_effects: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ServiceStatus:
    unit: str
    state: str

    @property
    def running(self) -> bool:
        return self.state == "active"


@dataclass(frozen=True)
class VerificationReport:
    services: List[ServiceStatus]
    url: str
    http_status: Optional[int] = None
    http_error: Optional[str] = None

    @property
    def http_ok(self) -> bool:
        return self.http_status is not None and 200 <= self.http_status < 400

    @property
    def ok(self) -> bool:
        return self.http_ok and all(service.running for service in self.services)

    def failures(self) -> List[str]:
        problems = [
            f"{service.unit} is {service.state}" for service in self.services if not service.running
        ]
        if not self.http_ok:
            if self.http_error:
                problems.append(f"{self.url} unreachable ({self.http_error})")
            else:
                problems.append(f"{self.url} returned HTTP {self.http_status}")
        return problems


@dataclass(frozen=True)
class ProvisioningSummary:
    site_urls: List[str]
    credentials: GeneratedCredentials
    db_name: str
    db_user: str
    verification: VerificationReport
    log_file: str
