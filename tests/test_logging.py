"""Tests for the loguru setup."""

from docgraph.utils.logging import configure_file_logging, logger


def test_file_logging_writes_debug_records(tmp_path):
    log_dir = tmp_path / "logs"
    handler_id = configure_file_logging(log_dir)
    try:
        logger.debug("indexed 3 features")
    finally:
        logger.remove(handler_id)

    text = (log_dir / "docgraph.log").read_text(encoding="utf-8")
    assert "DEBUG" in text
    assert "indexed 3 features" in text


def test_removed_file_handler_stops_writing(tmp_path):
    handler_id = configure_file_logging(tmp_path, level="WARNING")
    logger.info("below threshold")
    logger.warning("kept")
    logger.remove(handler_id)
    logger.warning("after removal")

    text = (tmp_path / "docgraph.log").read_text(encoding="utf-8")
    assert "kept" in text
    assert "below threshold" not in text
    assert "after removal" not in text
