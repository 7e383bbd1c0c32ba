import logging

import pytest

from gridpoint import BoundingBox, crop, set_log_level, setup_logging


@pytest.fixture
def restore_package_logger():
    logger = logging.getLogger("gridpoint")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    for handler in logger.handlers:
        if handler not in saved[1]:
            handler.close()
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


def test_package_logger_is_silent_by_default():
    logger = logging.getLogger("gridpoint")
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


def test_setup_logging_with_file(tmp_path, restore_package_logger):
    log_file = tmp_path / "logs" / "gridpoint.log"
    logger = setup_logging(level="DEBUG", log_file=log_file)

    assert logger.level == logging.DEBUG
    assert not logger.propagate
    assert len(logger.handlers) == 2

    logging.getLogger("gridpoint.processing.aggregation").debug("grouping layers")
    for handler in logger.handlers:
        handler.flush()
    assert "grouping layers" in log_file.read_text()


def test_set_log_level(restore_package_logger):
    setup_logging(level=logging.INFO)
    set_log_level("ERROR")
    logger = restore_package_logger
    assert logger.level == logging.ERROR
    assert all(h.level == logging.ERROR for h in logger.handlers)


def test_empty_crop_is_reported(grid_raster, caplog):
    with caplog.at_level(logging.INFO, logger="gridpoint"):
        crop(grid_raster, BoundingBox(100.0, 110.0, 0.0, 10.0))
    assert any(
        record.levelno == logging.WARNING and "does not overlap" in record.getMessage()
        for record in caplog.records
    )


def test_get_logger_nests_under_package():
    from gridpoint.core.logging_config import get_logger

    assert get_logger("processing.extraction").name == "gridpoint.processing.extraction"
    assert get_logger("gridpoint.main").name == "gridpoint.main"
    assert get_logger("gridpoint").name == "gridpoint"


def test_module_loggers_follow_package_level(restore_package_logger):
    from gridpoint.coordinates import crs_handler
    from gridpoint.io import raster_loader

    assert crs_handler.logger.name == "gridpoint.coordinates.crs_handler"
    assert raster_loader.logger.name == "gridpoint.io.raster_loader"

    set_log_level("DEBUG")
    assert crs_handler.logger.getEffectiveLevel() == logging.DEBUG
