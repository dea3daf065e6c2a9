import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_DB_NAME, DEFAULT_DB_USER, DEFAULT_DOMAIN, DEFAULT_LOG_FILE, DEFAULT_WP_DIR
from .core import WordPressProvisioner
from .errors import ProvisionerError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option("--yes", "-y", "assume_yes", is_flag=True, default=None, help="Skip the confirmation prompt.")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .wpprovisioner.yml if present.",
)
@click.option("--domain", required=False, help=f"Site domain (default: {DEFAULT_DOMAIN}).")
@click.option("--wp-dir", required=False, type=click.Path(), help=f"Web root (default: {DEFAULT_WP_DIR}).")
@click.option("--log-file", required=False, type=click.Path(), help=f"Run log (default: {DEFAULT_LOG_FILE}).")
@click.option("--db-name", required=False, help=f"WordPress database name (default: {DEFAULT_DB_NAME}).")
@click.option("--db-user", required=False, help=f"WordPress database user (default: {DEFAULT_DB_USER}).")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option(
    "--monitor-seconds",
    required=False,
    type=float,
    default=None,
    help="Keep polling service status for this many seconds after install (default: 0, disabled).",
)
@click.option(
    "--monitor-interval",
    required=False,
    type=float,
    default=None,
    help="Seconds between status polls while monitoring (default: 10).",
)
@click.option(
    "--http-timeout",
    required=False,
    type=float,
    default=None,
    help="Timeout in seconds for downloads and the reachability probe (default: 30).",
)
def main(
    assume_yes,
    config,
    domain,
    wp_dir,
    log_file,
    db_name,
    db_user,
    verbose,
    monitor_seconds,
    monitor_interval,
    http_timeout,
):
    """Install WordPress with Caddy, PHP-FPM, MariaDB and UFW on this server."""
    logger = logging.getLogger("wpprovisioner")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), ".wpprovisioner.yml")
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    assume_yes = bool(_resolve_option(assume_yes, config_values, "assume_yes", default=False))
    domain = _resolve_option(domain, config_values, "domain", default=DEFAULT_DOMAIN)
    wp_dir = _resolve_option(wp_dir, config_values, "wp_dir", default=DEFAULT_WP_DIR)
    log_file = _resolve_option(log_file, config_values, "log_file", default=DEFAULT_LOG_FILE)
    db_name = _resolve_option(db_name, config_values, "db_name", default=DEFAULT_DB_NAME)
    db_user = _resolve_option(db_user, config_values, "db_user", default=DEFAULT_DB_USER)
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    monitor_seconds = float(_resolve_option(monitor_seconds, config_values, "monitor_seconds", default=0.0))
    monitor_interval = _resolve_option(monitor_interval, config_values, "monitor_interval", default=10.0)
    http_timeout = _resolve_option(http_timeout, config_values, "http_timeout", default=30.0)
    php_tuning = {
        "memory_limit": config_values.get("php_memory_limit"),
        "upload_max_filesize": config_values.get("php_upload_max_filesize"),
        "post_max_size": config_values.get("php_post_max_size"),
        "max_execution_time": config_values.get("php_max_execution_time"),
    }

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    try:
        provisioner = WordPressProvisioner(
            domain=domain,
            wp_dir=wp_dir,
            log_file=log_file,
            db_name=db_name,
            db_user=db_user,
            assume_yes=assume_yes,
            verbose=verbose,
            monitor_seconds=monitor_seconds,
            monitor_interval=monitor_interval,
            http_timeout=http_timeout,
            php_tuning=php_tuning,
        )
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(provisioner.run())


if __name__ == "__main__":
    main()
