import logging
import re

from wpprovisioner.services.run_log import RunLog


def test_run_log_appends_timestamped_lines(tmp_path):
    log_path = tmp_path / "logs" / "wp-install.log"
    logger = logging.getLogger("wpprovisioner.test_run_log")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    with RunLog(str(log_path), logger=logger):
        logger.info("first run")
    with RunLog(str(log_path), logger=logger):
        logger.warning("second run")

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert re.match(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[INFO\] first run$", lines[0])
    assert lines[1].endswith("[WARNING] second run")


def test_run_log_detaches_handler_on_close(tmp_path):
    logger = logging.getLogger("wpprovisioner.test_run_log_detach")
    run_log = RunLog(str(tmp_path / "run.log"), logger=logger)

    run_log.open()
    run_log.open()
    assert len(logger.handlers) == 1

    run_log.close()
    assert logger.handlers == []
    assert run_log.handler is None
