"""Caddy web server installation and site configuration."""

from wpprovisioner.constants import (
    CADDY_KEY_URL,
    CADDY_KEYRING,
    CADDY_SOURCE_LINE,
    CADDY_SOURCES_LIST,
    CADDY_UNIT,
    CADDYFILE_PATH,
    FILE_MODE,
)


class WebServerService:
    """Installs Caddy and points it at the WordPress web root."""

    def __init__(
        self,
        logger,
        console,
        run_cmd,
        package_service,
        service_manager,
        filesystem_service,
        caddyfile_path: str = CADDYFILE_PATH,
        keyring_path: str = CADDY_KEYRING,
        sources_path: str = CADDY_SOURCES_LIST,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.package_service = package_service
        self.service_manager = service_manager
        self.filesystem_service = filesystem_service
        self.caddyfile_path = caddyfile_path
        self.keyring_path = keyring_path
        self.sources_path = sources_path

    def install(self):
        self.console.print("[blue]Installing Caddy...[/blue]")
        self.package_service.add_apt_repository(
            name="Caddy",
            key_url=CADDY_KEY_URL,
            keyring_path=self.keyring_path,
            sources_path=self.sources_path,
            source_line=CADDY_SOURCE_LINE,
        )
        self.package_service.install([CADDY_UNIT])
        self.service_manager.enable_and_start(CADDY_UNIT)

    @staticmethod
    def _site_block(address: str, wp_dir: str, php_fpm_socket: str) -> str:
        return f"""{address} {{
    root * {wp_dir}
    encode gzip
    php_fastcgi unix/{php_fpm_socket}
    file_server
}}
"""

    def build_caddyfile(self, server_ip: str, wp_dir: str, php_fpm_socket: str) -> str:
        blocks = ["# Managed by wpprovisioner"]
        if server_ip:
            blocks.append("# Reachable on the server address")
            blocks.append(self._site_block(f"http://{server_ip}", wp_dir, php_fpm_socket))
        blocks.append("# Any other host on port 80")
        blocks.append(self._site_block(":80", wp_dir, php_fpm_socket))
        return "\n".join(blocks)

    def configure(self, run_context):
        self.console.print("[blue]Configuring Caddy...[/blue]")
        content = self.build_caddyfile(
            server_ip=run_context.server_ip,
            wp_dir=run_context.wp_dir,
            php_fpm_socket=run_context.php_fpm_socket,
        )
        self.filesystem_service.write_text(self.caddyfile_path, content, FILE_MODE)
        self.run_cmd(
            ["caddy", "validate", "--config", self.caddyfile_path, "--adapter", "caddyfile"],
            capture_output=True,
        )
        self.service_manager.restart(CADDY_UNIT)
