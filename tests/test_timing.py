import logging

import pytest

from util.timing import timed

logger = logging.getLogger("tests.timing")


def test_success_logs_done_with_fields(caplog):
    caplog.set_level(logging.INFO, logger="tests.timing")

    with timed(logger, "fast.knn", k=5):
        pass

    (record,) = caplog.records
    assert record.levelno == logging.INFO
    assert record.getMessage().startswith("fast.knn.done ms=")
    assert record.getMessage().endswith(" k=5")


def test_failure_logs_error_kind_and_reraises(caplog):
    caplog.set_level(logging.INFO, logger="tests.timing")

    with pytest.raises(ConnectionError):
        with timed(logger, "durable.query", tier="durable"):
            raise ConnectionError("reset")

    (record,) = caplog.records
    assert record.levelno == logging.WARNING
    assert "durable.query.failed" in record.getMessage()
    assert "err=ConnectionError tier=durable" in record.getMessage()
