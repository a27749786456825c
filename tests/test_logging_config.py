from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.readings",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Skipping series entry",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s | %(message)s")

    line = formatter.format(
        _record(metric="BPM", raw_timestamp="not-a-date", reason="invalid timestamp", ignored="x")
    )

    assert line == (
        "WARNING | Skipping series entry | metric=BPM raw_timestamp=not-a-date reason=invalid timestamp"
    )


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["user_id", "window"])

    assert formatter.format(_record(user_id=None)) == "Skipping series entry"
    assert formatter.format(_record(window="last-7-days")) == "Skipping series entry | window=last-7-days"
