"""Filesystem helpers for wpprovisioner."""

import logging
import os
import tempfile

from rich.console import Console

from wpprovisioner.errors import StepExecutionError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def write_text(self, path: str, content: str, mode: int):
        """Atomically replaces ``path`` with ``content`` and applies ``mode``."""
        directory = os.path.dirname(path) or "."
        os.makedirs(directory, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(prefix=".wpprovisioner-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(content)
            os.chmod(temp_path, mode)
            os.replace(temp_path, path)
        except OSError as exc:
            raise StepExecutionError(f"Could not write '{path}': {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

        self.logger.info("Wrote %s", path)

    def set_permissions(self, path: str, mode: int):
        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def set_tree_permissions(self, root: str, dir_mode: int, file_mode: int):
        if not os.path.exists(root):
            return

        self.set_permissions(root, dir_mode)
        for current_root, dirs, files in os.walk(root):
            for directory in dirs:
                self.set_permissions(os.path.join(current_root, directory), dir_mode)
            for file_name in files:
                path = os.path.join(current_root, file_name)
                if os.path.islink(path):
                    continue
                self.set_permissions(path, file_mode)
