"""MariaDB installation and bootstrap for wpprovisioner."""

from typing import Callable

from wpprovisioner.constants import DATABASE_PACKAGES, DATABASE_UNIT


class DatabaseService:
    """Installs MariaDB and creates the WordPress database and account."""

    CLIENT = "mariadb"

    def __init__(self, logger, console, run_cmd: Callable, package_service, service_manager):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.package_service = package_service
        self.service_manager = service_manager

    def install(self):
        self.console.print("[blue]Installing MariaDB...[/blue]")
        self.package_service.install(DATABASE_PACKAGES)
        self.service_manager.enable_and_start(DATABASE_UNIT)

    @staticmethod
    def build_bootstrap_sql(db_name: str, db_user: str, db_password: str, root_password: str) -> str:
        """Renders re-runnable SQL; every run resets both passwords to the given values.

        The administrative account keeps unix_socket authentication so that a later
        run as root can reconnect without knowing the previous password.
        """
        return f"""
CREATE DATABASE IF NOT EXISTS `{db_name}` DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;
CREATE USER IF NOT EXISTS '{db_user}'@'localhost' IDENTIFIED BY '{db_password}';
ALTER USER '{db_user}'@'localhost' IDENTIFIED BY '{db_password}';
GRANT ALL PRIVILEGES ON `{db_name}`.* TO '{db_user}'@'localhost';
ALTER USER 'root'@'localhost' IDENTIFIED VIA unix_socket OR mysql_native_password USING PASSWORD('{root_password}');
DELETE FROM mysql.global_priv WHERE User='';
DROP DATABASE IF EXISTS test;
FLUSH PRIVILEGES;
""".strip() + "\n"

    def bootstrap(self, run_context):
        self.console.print("[blue]Configuring database...[/blue]")
        self.logger.info(
            "Creating database '%s' and user '%s'", run_context.db_name, run_context.db_user
        )
        sql = self.build_bootstrap_sql(
            db_name=run_context.db_name,
            db_user=run_context.db_user,
            db_password=run_context.credentials.db_password,
            root_password=run_context.credentials.db_root_password,
        )
        # SQL goes over stdin so passwords never show up in the process list
        self.run_cmd([self.CLIENT, "--user=root"], input_text=sql)
