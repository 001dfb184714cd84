# clinic_core/common/tests/test_logging.py
import logging


def test_app_logger_emits_through_root_only():
    logger = logging.getLogger("clinic_core")
    assert logger.handlers == []
    assert logger.propagate is True


def test_app_record_is_captured_once(caplog):
    with caplog.at_level("INFO", logger="clinic_core"):
        logging.getLogger("clinic_core.patients.services").info("patient touched")

    assert [r.getMessage() for r in caplog.records] == ["patient touched"]
