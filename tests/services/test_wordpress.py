import io
import subprocess
import tarfile

import pytest
from rich.console import Console

from wpprovisioner.errors import StepExecutionError
from wpprovisioner.models import GeneratedCredentials, RunContext
from wpprovisioner.services.filesystem import FileSystemService
from wpprovisioner.services.validation import ValidationService
from wpprovisioner.services.wordpress import WordPressService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


SALTS = "\n".join(
    f"define('{key}',         'value-for-{key.lower()}');"
    for key in (
        "AUTH_KEY",
        "SECURE_AUTH_KEY",
        "LOGGED_IN_KEY",
        "NONCE_KEY",
        "AUTH_SALT",
        "SECURE_AUTH_SALT",
        "LOGGED_IN_SALT",
        "NONCE_SALT",
    )
)


class FakeResponse:
    def __init__(self, payload: bytes = b"", text: str = ""):
        self.payload = payload
        self.text = text
        self.headers = {"Content-Length": str(len(payload))}

    def raise_for_status(self):
        return None

    def iter_content(self, chunk_size=8192):
        yield self.payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeRequestsModule:
    class RequestException(Exception):
        pass

    def __init__(self, archive: bytes = b"", salts: str = SALTS, fail: bool = False):
        self.archive = archive
        self.salts = salts
        self.fail = fail
        self.urls = []

    def get(self, url, *_args, **_kwargs):
        self.urls.append(url)
        if self.fail:
            raise self.RequestException("network down")
        if url.endswith(".tar.gz"):
            return FakeResponse(payload=self.archive)
        return FakeResponse(text=self.salts)


def _tarball(entries) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, data in entries:
            info = tarfile.TarInfo(name)
            if data is None:
                info.type = tarfile.DIRTYPE
                archive.addfile(info)
                continue
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def _context(wp_dir) -> RunContext:
    return RunContext(
        run_id="abc",
        domain="localhost",
        wp_dir=str(wp_dir),
        log_file="/var/log/wp-install.log",
        db_name="wordpress",
        db_user="wordpress",
        credentials=GeneratedCredentials(db_root_password="rootpw", db_password="apppw"),
    )


def _service(requests_module, commands=None):
    def fake_run_cmd(cmd, check=True, capture_output=False, input_text=None):
        if commands is not None:
            commands.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    return WordPressService(
        logger=DummyLogger(),
        console=Console(record=True),
        run_cmd=fake_run_cmd,
        filesystem_service=FileSystemService(logger=DummyLogger(), console=Console(record=True)),
        validation_service=ValidationService(),
        requests_module=requests_module,
    )


def test_safe_extract_strips_release_folder(tmp_path):
    archive = tmp_path / "wordpress.tar.gz"
    archive.write_bytes(
        _tarball(
            [
                ("wordpress", None),
                ("wordpress/index.php", b"<?php // index"),
                ("wordpress/wp-admin/admin.php", b"<?php // admin"),
            ]
        )
    )
    destination = tmp_path / "html"

    _service(FakeRequestsModule()).safe_extract_tar(str(archive), str(destination))

    assert (destination / "index.php").read_bytes() == b"<?php // index"
    assert (destination / "wp-admin" / "admin.php").exists()
    assert not (destination / "wordpress").exists()


def test_safe_extract_blocks_path_traversal(tmp_path):
    archive = tmp_path / "wordpress.tar.gz"
    archive.write_bytes(_tarball([("wordpress/../../escape.php", b"malicious")]))
    destination = tmp_path / "html"

    with pytest.raises(StepExecutionError, match="Unsafe archive entry"):
        _service(FakeRequestsModule()).safe_extract_tar(str(archive), str(destination))

    assert not (tmp_path / "escape.php").exists()


def test_safe_extract_rejects_symlinks(tmp_path):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        link = tarfile.TarInfo("wordpress/evil")
        link.type = tarfile.SYMTYPE
        link.linkname = "/etc/passwd"
        tar.addfile(link)
    archive = tmp_path / "wordpress.tar.gz"
    archive.write_bytes(buffer.getvalue())

    with pytest.raises(StepExecutionError, match="not a regular file"):
        _service(FakeRequestsModule()).safe_extract_tar(str(archive), str(tmp_path / "html"))


def test_install_downloads_extracts_and_fixes_ownership(tmp_path):
    requests_module = FakeRequestsModule(archive=_tarball([("wordpress/index.php", b"<?php")]))
    commands = []
    wp_dir = tmp_path / "html"

    _service(requests_module, commands).install(_context(wp_dir))

    assert requests_module.urls == ["https://wordpress.org/latest.tar.gz"]
    assert (wp_dir / "index.php").exists()
    assert ["chown", "-R", "www-data:www-data", str(wp_dir)] in commands


def test_fetch_salts_rejects_incomplete_response():
    requests_module = FakeRequestsModule(salts="define('AUTH_KEY', 'x');")

    with pytest.raises(StepExecutionError, match="authentication salts"):
        _service(requests_module).fetch_salts()


def test_fetch_salts_wraps_network_errors():
    with pytest.raises(StepExecutionError, match="authentication salts"):
        _service(FakeRequestsModule(fail=True)).fetch_salts()


def test_configure_writes_wp_config_with_credentials_and_salts(tmp_path):
    wp_dir = tmp_path / "html"
    wp_dir.mkdir()

    path = _service(FakeRequestsModule()).configure(_context(wp_dir))

    content = (wp_dir / "wp-config.php").read_text(encoding="utf-8")
    assert path == str(wp_dir / "wp-config.php")
    assert "define( 'DB_NAME', 'wordpress' );" in content
    assert "define( 'DB_PASSWORD', 'apppw' );" in content
    assert "define('NONCE_SALT'" in content
    assert content.rstrip().endswith("require_once ABSPATH . 'wp-settings.php';")
    assert (wp_dir / "wp-config.php").stat().st_mode & 0o777 == 0o640
