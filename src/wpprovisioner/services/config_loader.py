"""Configuration loader for wpprovisioner."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from wpprovisioner.errors import ProvisionerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "assume_yes",
        "domain",
        "wp_dir",
        "log_file",
        "db_name",
        "db_user",
        "verbose",
        "monitor_seconds",
        "monitor_interval",
        "http_timeout",
        "php_memory_limit",
        "php_upload_max_filesize",
        "php_post_max_size",
        "php_max_execution_time",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ProvisionerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ProvisionerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ProvisionerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise ProvisionerError(f"Unknown configuration keys: {unknown_list}")

        return parsed
