"""PHP-FPM installation and tuning for wpprovisioner."""

import os
import re
from typing import Callable, Dict, Optional

from packaging import version

from wpprovisioner.constants import FILE_MODE, PHP_PACKAGES, PHP_PPA, PHP_TUNING_FILENAME
from wpprovisioner.errors import StepExecutionError
from wpprovisioner.errors_catalog import actionable_error


class PhpRuntimeService:
    """Installs PHP from the Ondrej PPA and applies WordPress-friendly limits."""

    VERSION_PATTERN = re.compile(r"^PHP\s+(\d+\.\d+(?:\.\d+)?)")
    DEFAULT_TUNING = {
        "memory_limit": "256M",
        "upload_max_filesize": "64M",
        "post_max_size": "64M",
        "max_execution_time": "300",
    }

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        package_service,
        service_manager,
        filesystem_service,
        php_conf_root: str = "/etc/php",
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.package_service = package_service
        self.service_manager = service_manager
        self.filesystem_service = filesystem_service
        self.php_conf_root = php_conf_root

    def install(self) -> str:
        self.console.print("[blue]Installing PHP...[/blue]")
        self.package_service.add_ppa(PHP_PPA)
        self.package_service.install(PHP_PACKAGES)

        php_version = self.detect_version()
        self.logger.info("PHP version installed: %s", php_version)
        return php_version

    def detect_version(self) -> str:
        result = self.run_cmd(["php", "-v"], capture_output=True)
        parsed = self.parse_version(result.stdout or "")
        if not parsed:
            raise StepExecutionError(actionable_error("php_version_undetected"))
        return parsed

    def parse_version(self, output: str) -> Optional[str]:
        first_line = output.strip().splitlines()[0] if output.strip() else ""
        match = self.VERSION_PATTERN.match(first_line)
        if not match:
            return None

        parsed = version.parse(match.group(1))
        return f"{parsed.major}.{parsed.minor}"

    def tuning_path(self, php_version: str) -> str:
        return os.path.join(self.php_conf_root, php_version, "fpm", "conf.d", PHP_TUNING_FILENAME)

    def render_tuning(self, overrides: Optional[Dict[str, str]] = None) -> str:
        settings = dict(self.DEFAULT_TUNING)
        settings.update({key: value for key, value in (overrides or {}).items() if value is not None})
        lines = ["; Managed by wpprovisioner"]
        lines.extend(f"{key} = {value}" for key, value in settings.items())
        return "\n".join(lines) + "\n"

    def apply_tuning(self, php_version: str, fpm_unit: str, overrides: Optional[Dict[str, str]] = None):
        self.console.print("[blue]Tuning PHP-FPM...[/blue]")
        self.filesystem_service.write_text(
            self.tuning_path(php_version),
            self.render_tuning(overrides),
            FILE_MODE,
        )
        self.service_manager.enable(fpm_unit)
        self.service_manager.restart(fpm_unit)
