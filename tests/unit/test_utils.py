"""Tests for logging, progress and installation helpers."""

from pathlib import Path
import sys
import logging

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dupseeker.utils.logging import (
    LOGGER_NAMESPACE,
    LogTemplates,
    get_logger,
    level_from_name,
    setup_logging,
)
from dupseeker.utils.progress import iter_progress
from dupseeker.utils.validators import REQUIRED_MODULES, validate_installation


class TestLogging:
    """Test logging configuration helpers."""

    def test_get_logger_is_namespaced(self):
        assert get_logger("engine").name == f"{LOGGER_NAMESPACE}.engine"

    def test_level_from_name(self):
        assert level_from_name("debug") == logging.DEBUG
        assert level_from_name("INFO") == logging.INFO
        assert level_from_name(None) == logging.WARNING
        assert level_from_name("chatty", default=logging.ERROR) == logging.ERROR

    def test_setup_logging_is_idempotent(self):
        setup_logging(level=logging.INFO)
        setup_logging(level=logging.DEBUG)
        app_logger = logging.getLogger(LOGGER_NAMESPACE)
        assert len(app_logger.handlers) == 1
        assert app_logger.level == logging.DEBUG
        assert app_logger.propagate is False

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(level=logging.INFO, log_file=log_file)
        get_logger("test").info("hello from the test")
        for handler in logging.getLogger(LOGGER_NAMESPACE).handlers:
            handler.flush()
        assert "hello from the test" in log_file.read_text()

    def test_templates_format(self):
        message = LogTemplates.RUN_SUCCESS.format(duplicates=1200, examined=5000, duration=2.25)
        assert "1,200" in message
        assert "2.2s" in message or "2.3s" in message


class TestProgress:
    """Test the tqdm wrapper."""

    def test_disabled_passes_items_through(self):
        assert list(iter_progress(range(5), enabled=False)) == [0, 1, 2, 3, 4]

    def test_enabled_yields_all_items(self):
        assert list(iter_progress(iter("abc"), desc="reading")) == ["a", "b", "c"]

    def test_enabled_with_total(self):
        assert list(iter_progress([1, 2], total=2)) == [1, 2]


class TestValidators:
    """Test installation checks."""

    def test_required_modules_cover_stack(self):
        assert {"pysam", "pandas", "numpy", "networkx", "yaml", "click", "tqdm"} <= set(
            REQUIRED_MODULES
        )

    def test_full_check_passes(self):
        assert validate_installation(full_check=True) == []
