import logging
import os
import secrets
import subprocess
import time
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Optional

import requests
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from .constants import (
    BASE_PACKAGES,
    DEFAULT_DB_NAME,
    DEFAULT_DB_USER,
    DEFAULT_DOMAIN,
    DEFAULT_LOG_FILE,
    DEFAULT_WP_DIR,
)
from .errors import PrivilegeError, ProvisionerError, StepExecutionError, VerificationError
from .errors_catalog import actionable_error, step_failure
from .models import (
    GeneratedCredentials,
    ProvisioningStep,
    ProvisioningSummary,
    RunContext,
    VerificationReport,
)
from .services.command_runner import CommandRunner
from .services.database import DatabaseService
from .services.filesystem import FileSystemService
from .services.firewall import FirewallService
from .services.monitor import StatusMonitor
from .services.packages import PackageService
from .services.php_runtime import PhpRuntimeService
from .services.run_log import RunLog
from .services.systemd import ServiceManager
from .services.validation import ValidationService
from .services.verification import VerificationService
from .services.web_server import WebServerService
from .services.wordpress import WordPressService

console = Console()
logger = logging.getLogger("wpprovisioner")


def generate_credentials() -> GeneratedCredentials:
    return GeneratedCredentials(
        db_root_password=secrets.token_hex(24),
        db_password=secrets.token_hex(24),
    )


def render_progress_bar(completed: int, total: int, width: int = 30) -> str:
    if total <= 0:
        done, total_units = 1, 1
    else:
        done, total_units = max(0, min(completed, total)), total
    filled = width * done // total_units
    percent = done * 100 // total_units
    return f"[{'#' * filled}{'-' * (width - filled)}] {percent:3d}% ({completed}/{total})"


class WordPressProvisioner:
    CONFIRM_PROMPT = "Install WordPress with Caddy, PHP-FPM, MariaDB and UFW on this machine?"

    def __init__(
        self,
        domain: str = DEFAULT_DOMAIN,
        wp_dir: str = DEFAULT_WP_DIR,
        log_file: str = DEFAULT_LOG_FILE,
        db_name: str = DEFAULT_DB_NAME,
        db_user: str = DEFAULT_DB_USER,
        assume_yes: bool = False,
        verbose: bool = False,
        monitor_seconds: float = 0.0,
        monitor_interval: float = 10.0,
        http_timeout: float = 30.0,
        php_tuning: Optional[Dict[str, str]] = None,
        confirm: Optional[Callable[..., bool]] = None,
        euid_provider: Optional[Callable[[], int]] = None,
    ):
        self.validation_service = ValidationService()
        self.assume_yes = assume_yes
        self.verbose = verbose
        self.monitor_seconds = float(monitor_seconds or 0)
        self.monitor_interval = self.validation_service.validate_positive_number(
            monitor_interval, "monitor_interval"
        )
        self.http_timeout = self.validation_service.validate_positive_number(http_timeout, "http_timeout")
        self.php_tuning = {
            key: self.validation_service.validate_php_size(value, key)
            for key, value in (php_tuning or {}).items()
            if value is not None
        }
        self.confirm = confirm or Confirm.ask
        self.euid_provider = euid_provider or os.geteuid
        self.current_step_name: Optional[str] = None

        self.run_context = RunContext(
            run_id=uuid.uuid4().hex[:10],
            domain=self.validation_service.validate_domain(domain),
            wp_dir=os.path.abspath(wp_dir),
            log_file=os.path.abspath(log_file),
            db_name=self.validation_service.validate_sql_identifier(db_name, "Database name"),
            db_user=self.validation_service.validate_sql_identifier(db_user, "Database user"),
            credentials=generate_credentials(),
        )
        self.run_log = RunLog(
            self.run_context.log_file,
            logger=logger,
            level=logging.DEBUG if verbose else logging.INFO,
        )

        self.command_runner = CommandRunner(logger=logger)
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.service_manager = ServiceManager(logger=logger, run_cmd=self._run_cmd)
        self.package_service = PackageService(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            filesystem_service=self.filesystem_service,
            validation_service=self.validation_service,
            requests_module=requests,
            http_timeout=self.http_timeout,
        )
        self.php_runtime_service = PhpRuntimeService(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            package_service=self.package_service,
            service_manager=self.service_manager,
            filesystem_service=self.filesystem_service,
        )
        self.database_service = DatabaseService(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            package_service=self.package_service,
            service_manager=self.service_manager,
        )
        self.web_server_service = WebServerService(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            package_service=self.package_service,
            service_manager=self.service_manager,
            filesystem_service=self.filesystem_service,
        )
        self.wordpress_service = WordPressService(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            filesystem_service=self.filesystem_service,
            validation_service=self.validation_service,
            requests_module=requests,
            http_timeout=self.http_timeout,
        )
        self.firewall_service = FirewallService(logger=logger, console=console, run_cmd=self._run_cmd)
        self.verification_service = VerificationService(
            logger=logger,
            console=console,
            service_manager=self.service_manager,
            requests_module=requests,
            http_timeout=self.http_timeout,
        )

    def _run_cmd(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        input_text: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        return self.command_runner.run(
            cmd,
            check=check,
            capture_output=capture_output,
            input_text=input_text,
        )

    def check_privileges(self):
        if self.euid_provider() != 0:
            raise PrivilegeError(actionable_error("privilege_required"))

    def confirm_installation(self):
        if self.assume_yes:
            return
        if not self.confirm(self.CONFIRM_PROMPT, default=False):
            raise ProvisionerError(actionable_error("confirmation_declined"))

    def discover_server_ip(self) -> str:
        result = self._run_cmd(["hostname", "-I"], capture_output=True)
        addresses = (result.stdout or "").split()
        if not addresses:
            raise StepExecutionError(actionable_error("server_ip_unknown"))
        return addresses[0]

    # Step actions

    def install_dependencies(self):
        self.package_service.update()
        self.package_service.install(BASE_PACKAGES)

    def install_php(self):
        php_version = self.php_runtime_service.install()
        self.run_context = replace(self.run_context, php_version=php_version)

    def tune_php(self):
        self.php_runtime_service.apply_tuning(
            self.run_context.php_version,
            self.run_context.php_fpm_unit,
            self.php_tuning,
        )

    def install_database(self):
        self.database_service.install()

    def configure_database(self):
        self.database_service.bootstrap(self.run_context)

    def install_caddy(self):
        self.web_server_service.install()

    def install_wordpress(self):
        self.wordpress_service.install(self.run_context)

    def configure_wordpress(self):
        self.wordpress_service.configure(self.run_context)

    def configure_caddy(self):
        self.web_server_service.configure(self.run_context)

    def configure_firewall(self):
        self.firewall_service.configure()

    def build_steps(self) -> List[ProvisioningStep]:
        # wp-config.php must hold the new password before configure_database rotates it.
        wp_config = os.path.join(self.run_context.wp_dir, "wp-config.php")
        plan = [
            ("install_dependencies", self.install_dependencies, ["base packages", "ufw"]),
            ("install_php", self.install_php, ["php-fpm", "php extensions"]),
            ("tune_php", self.tune_php, ["php-fpm conf.d override", "php-fpm restarted"]),
            ("install_database", self.install_database, ["mariadb-server", "mariadb started"]),
            ("install_caddy", self.install_caddy, ["caddy apt repository", "caddy started"]),
            ("install_wordpress", self.install_wordpress, [self.run_context.wp_dir]),
            ("configure_wordpress", self.configure_wordpress, [wp_config]),
            ("configure_database", self.configure_database, ["database, user and grants"]),
            ("configure_caddy", self.configure_caddy, [self.web_server_service.caddyfile_path]),
            ("configure_firewall", self.configure_firewall, ["ufw enabled", "80,443/tcp allowed"]),
        ]
        return [
            ProvisioningStep(name=name, ordinal=index, action=action, side_effects=effects)
            for index, (name, action, effects) in enumerate(plan, start=1)
        ]

    def _run_step(self, step: ProvisioningStep, total: int):
        logger.info("[%s/%s] Starting step: %s", step.ordinal, total, step.name)
        if step.side_effects:
            logger.debug("Step %s affects: %s", step.name, ", ".join(step.side_effects))
        self.current_step_name = step.name
        started = time.monotonic()

        try:
            result = step.action()
        except Exception as exc:
            logger.debug("Step %s raised", step.name, exc_info=True)
            raise StepExecutionError(
                step_failure(step.name, str(exc), self.run_context.log_file),
                step=step.name,
            ) from exc

        logger.info("Finished step: %s (%.1fs)", step.name, time.monotonic() - started)
        self.current_step_name = None
        return result

    def run_steps(self, steps: List[ProvisioningStep]):
        total = len(steps)
        for completed, step in enumerate(steps, start=1):
            self._run_step(step, total)
            console.print(f"[cyan]{escape(render_progress_bar(completed, total))}[/cyan] {step.name}")

    def verify(self) -> VerificationReport:
        report = self.verification_service.verify(self.run_context)
        if not report.ok:
            self.print_service_table(report)
            raise VerificationError(
                actionable_error(
                    "verification_failed",
                    reason="; ".join(report.failures()),
                    log_file=self.run_context.log_file,
                ),
                report=report,
            )
        return report

    def build_summary(self, report: VerificationReport) -> ProvisioningSummary:
        return ProvisioningSummary(
            site_urls=self.run_context.site_urls,
            credentials=self.run_context.credentials,
            db_name=self.run_context.db_name,
            db_user=self.run_context.db_user,
            verification=report,
            log_file=self.run_context.log_file,
        )

    def print_service_table(self, report: VerificationReport):
        table = Table(title="Services")
        table.add_column("Service")
        table.add_column("Status")
        for status in report.services:
            color = "green" if status.running else "red"
            table.add_row(status.unit, f"[{color}]{status.state}[/{color}]")
        http_label = str(report.http_status) if report.http_status is not None else report.http_error
        table.add_row(report.url, f"[{'green' if report.http_ok else 'red'}]HTTP {http_label}[/]")
        console.print(table)

    def print_summary(self, summary: ProvisioningSummary):
        console.print("[bold green]WordPress installation is complete![/bold green]")
        self.print_service_table(summary.verification)

        details = Table(title="Site & credentials", show_header=False)
        details.add_column("Item", style="bold")
        details.add_column("Value")
        for url in summary.site_urls:
            details.add_row("Site URL", url)
        details.add_row("Database", summary.db_name)
        details.add_row("Database user", summary.db_user)
        details.add_row("Database password", summary.credentials.db_password)
        details.add_row("Database root password", summary.credentials.db_root_password)
        details.add_row("Log file", summary.log_file)
        console.print(details)
        console.print(
            "[yellow]Store these passwords now; they are only kept in wp-config.php. "
            "Finish the setup in the WordPress web wizard.[/yellow]"
        )

    def execute(self, steps: Optional[List[ProvisioningStep]] = None) -> ProvisioningSummary:
        self.check_privileges()
        self.confirm_installation()
        self.run_log.open()

        logger.info("Starting wpprovisioner run %s", self.run_context.run_id)
        server_ip = self.discover_server_ip()
        self.run_context = replace(self.run_context, server_ip=server_ip)
        logger.info("Server IP: %s", server_ip)

        self.run_steps(steps if steps is not None else self.build_steps())

        report = self.verify()
        summary = self.build_summary(report)
        logger.info(
            "Installation complete. You can now access WordPress via %s.",
            ", ".join(summary.site_urls),
        )
        return summary

    def start_monitor(self) -> Optional[StatusMonitor]:
        if self.monitor_seconds <= 0:
            return None

        monitor = StatusMonitor(
            logger=logger,
            console=console,
            service_manager=self.service_manager,
            units=self.verification_service.managed_units(self.run_context),
            duration_seconds=self.monitor_seconds,
            interval_seconds=self.monitor_interval,
        )
        console.print(
            f"[dim]Watching service status for {self.monitor_seconds:.0f}s (Ctrl+C to stop)...[/dim]"
        )
        monitor.start()
        return monitor

    def run(self, steps: Optional[List[ProvisioningStep]] = None) -> int:
        try:
            summary = self.execute(steps)
            self.print_summary(summary)
            monitor = self.start_monitor()
            if monitor is not None:
                monitor.wait()
            return 0

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user during %s", self.current_step_name or "setup")
            return 1
        except PrivilegeError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            return 1
        except ProvisionerError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            logger.error(str(exc))
            if self.run_log.handler is not None:
                console.print(f"[dim]See {self.run_context.log_file} for details.[/dim]")
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            return 1
        finally:
            self.run_log.close()
