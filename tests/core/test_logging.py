import sys
import pytest
from loguru import logger

from foundation.core.logging import setup_logging


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_console_only(restore_logger):
    sinks = setup_logging(debug_mode=False, log_dir=None)
    assert len(sinks) == 1


def test_file_sink_created(restore_logger, tmp_path):
    log_dir = tmp_path / "logs"

    sinks = setup_logging(debug_mode=True, log_dir=str(log_dir))
    logger.debug("written to file")
    logger.complete()

    assert len(sinks) == 2
    assert any(path.name.startswith("foundation_") for path in log_dir.iterdir())
