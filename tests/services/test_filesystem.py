import os

from wpprovisioner.services.filesystem import FileSystemService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


def test_write_text_replaces_content_and_sets_mode(tmp_path):
    service = FileSystemService(logger=DummyLogger(), console=DummyConsole())
    target = tmp_path / "etc" / "Caddyfile"

    service.write_text(str(target), "old\n", 0o644)
    service.write_text(str(target), "new\n", 0o640)

    assert target.read_text(encoding="utf-8") == "new\n"
    assert target.stat().st_mode & 0o777 == 0o640
    assert [name for name in os.listdir(target.parent)] == ["Caddyfile"]


def test_set_tree_permissions_applies_modes(tmp_path):
    service = FileSystemService(logger=DummyLogger(), console=DummyConsole())
    root = tmp_path / "html"
    (root / "wp-admin").mkdir(parents=True)
    (root / "index.php").write_text("<?php", encoding="utf-8")
    os.chmod(root / "index.php", 0o600)
    os.chmod(root / "wp-admin", 0o700)

    service.set_tree_permissions(str(root), dir_mode=0o755, file_mode=0o644)

    assert (root / "index.php").stat().st_mode & 0o777 == 0o644
    assert (root / "wp-admin").stat().st_mode & 0o777 == 0o755
