import logging

from src.infrastructure.logging.logger_service import FileLoggerService


def test_file_logger_writes_context(tmp_path):
    logger = FileLoggerService(level=logging.DEBUG, name="ScreenTranslatorTest", log_dir=str(tmp_path))
    try:
        logger.info("Region captured", display_id="2", size_bytes=120)
        for handler in logger.logger.handlers:
            handler.flush()

        content = (tmp_path / "ScreenTranslatorTest.log").read_text(encoding="utf-8")
        assert "INFO - Region captured [display_id=2 size_bytes=120]" in content
    finally:
        for handler in list(logger.logger.handlers):
            handler.close()
            logger.logger.removeHandler(handler)


def test_file_handler_not_duplicated(tmp_path):
    first = FileLoggerService(name="ScreenTranslatorDup", log_dir=str(tmp_path))
    FileLoggerService(name="ScreenTranslatorDup", log_dir=str(tmp_path))
    try:
        file_handlers = [h for h in first.logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
    finally:
        for handler in list(first.logger.handlers):
            handler.close()
            first.logger.removeHandler(handler)
