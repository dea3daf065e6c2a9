"""WordPress download, extraction and configuration."""

import os
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional

import requests
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from wpprovisioner.constants import (
    DIR_MODE,
    FILE_MODE,
    SECRET_FILE_MODE,
    WEB_GROUP,
    WEB_USER,
    WORDPRESS_ARCHIVE_URL,
    WORDPRESS_SALT_KEYS,
    WORDPRESS_SALT_URL,
)
from wpprovisioner.errors import StepExecutionError
from wpprovisioner.errors_catalog import actionable_error


class WordPressService:
    """Fetches the WordPress release and writes its configuration."""

    ARCHIVE_ROOT = "wordpress"
    CONFIG_FILENAME = "wp-config.php"

    def __init__(
        self,
        logger,
        console,
        run_cmd,
        filesystem_service,
        validation_service,
        requests_module=requests,
        http_timeout: float = 60.0,
        archive_url: str = WORDPRESS_ARCHIVE_URL,
        salt_url: str = WORDPRESS_SALT_URL,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.filesystem_service = filesystem_service
        self.validation_service = validation_service
        self.requests = requests_module
        self.http_timeout = http_timeout
        self.archive_url = archive_url
        self.salt_url = salt_url

    def download_file(self, url: str, dest_path: str, description: str = "Downloading..."):
        self.logger.info("Downloading %s to %s", url, dest_path)
        self.validation_service.enforce_https_policy(url, description)

        try:
            with self.requests.get(url, stream=True, timeout=self.http_timeout) as response:
                response.raise_for_status()
                total_size = int(response.headers.get("Content-Length", 0))

                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    TimeElapsedColumn(),
                    console=self.console,
                ) as progress:
                    task = progress.add_task(f"[cyan]{description}", total=total_size or None)
                    with open(dest_path, "wb") as file_obj:
                        for chunk in response.iter_content(chunk_size=8192):
                            if not chunk:
                                continue
                            file_obj.write(chunk)
                            progress.update(task, advance=len(chunk))
        except self.requests.RequestException as exc:
            raise StepExecutionError(f"Download failed for {description}: {exc}") from exc

    def _member_target(self, base: Path, member: tarfile.TarInfo) -> Optional[Path]:
        parts = PurePosixPath(member.name.replace("\\", "/")).parts
        if parts and parts[0] == self.ARCHIVE_ROOT:
            parts = parts[1:]
        if not parts:
            return None

        if PurePosixPath(member.name).is_absolute() or ".." in parts:
            raise StepExecutionError(
                f"Unsafe archive entry detected: `{member.name}`. "
                "Extraction aborted to prevent path traversal."
            )
        if not (member.isfile() or member.isdir()):
            raise StepExecutionError(
                f"Unsafe archive entry detected: `{member.name}` is not a regular file or directory."
            )

        target = base.joinpath(*parts).resolve()
        if os.path.commonpath([str(base), str(target)]) != str(base):
            raise StepExecutionError(f"Unsafe archive entry detected: `{member.name}`.")
        return target

    def safe_extract_tar(self, archive_path: str, destination_dir: str):
        """Extracts the release into ``destination_dir`` without its top-level folder."""
        base = Path(destination_dir).resolve()
        base.mkdir(parents=True, exist_ok=True)

        try:
            with tarfile.open(archive_path, "r:*") as archive:
                members = [(member, self._member_target(base, member)) for member in archive.getmembers()]

                for member, target in members:
                    if target is None:
                        continue
                    if member.isdir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue

                    target.parent.mkdir(parents=True, exist_ok=True)
                    source = archive.extractfile(member)
                    if source is None:
                        continue
                    with source, open(target, "wb") as dst:
                        shutil.copyfileobj(source, dst)
        except tarfile.TarError as exc:
            raise StepExecutionError(f"Invalid WordPress archive: {archive_path}") from exc

    def install(self, run_context):
        self.console.print("[blue]Installing WordPress...[/blue]")
        work_dir = tempfile.mkdtemp(prefix="wpprovisioner-")
        try:
            archive_path = os.path.join(work_dir, "wordpress.tar.gz")
            self.download_file(self.archive_url, archive_path, "Downloading WordPress...")
            self.safe_extract_tar(archive_path, run_context.wp_dir)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

        self.fix_ownership(run_context.wp_dir)

    def fix_ownership(self, wp_dir: str):
        self.run_cmd(["chown", "-R", f"{WEB_USER}:{WEB_GROUP}", wp_dir])
        self.filesystem_service.set_tree_permissions(wp_dir, dir_mode=DIR_MODE, file_mode=FILE_MODE)

    def fetch_salts(self) -> str:
        self.validation_service.enforce_https_policy(self.salt_url, "salt endpoint")
        try:
            response = self.requests.get(self.salt_url, timeout=self.http_timeout)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            raise StepExecutionError(actionable_error("salts_unavailable", url=self.salt_url)) from exc

        salts = response.text.strip()
        missing = [key for key in WORDPRESS_SALT_KEYS if f"define('{key}'" not in salts]
        if missing:
            self.logger.debug("Salt endpoint response missing keys: %s", ", ".join(missing))
            raise StepExecutionError(actionable_error("salts_unavailable", url=self.salt_url))
        return salts

    @staticmethod
    def build_config(db_name: str, db_user: str, db_password: str, salts: str) -> str:
        return f"""<?php
/**
 * WordPress configuration generated by wpprovisioner.
 */

define( 'DB_NAME', '{db_name}' );
define( 'DB_USER', '{db_user}' );
define( 'DB_PASSWORD', '{db_password}' );
define( 'DB_HOST', 'localhost' );
define( 'DB_CHARSET', 'utf8mb4' );
define( 'DB_COLLATE', '' );

{salts}

$table_prefix = 'wp_';

define( 'WP_DEBUG', false );
define( 'FS_METHOD', 'direct' );

if ( ! defined( 'ABSPATH' ) ) {{
	define( 'ABSPATH', __DIR__ . '/' );
}}

require_once ABSPATH . 'wp-settings.php';
"""

    def config_path(self, run_context) -> str:
        return os.path.join(run_context.wp_dir, self.CONFIG_FILENAME)

    def configure(self, run_context) -> str:
        self.console.print("[blue]Writing wp-config.php...[/blue]")
        content = self.build_config(
            db_name=run_context.db_name,
            db_user=run_context.db_user,
            db_password=run_context.credentials.db_password,
            salts=self.fetch_salts(),
        )
        path = self.config_path(run_context)
        self.filesystem_service.write_text(path, content, SECRET_FILE_MODE)
        self.run_cmd(["chown", f"{WEB_USER}:{WEB_GROUP}", path])
        return path
