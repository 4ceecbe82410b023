"""Unit tests for wayfinder.logging_config."""

from __future__ import annotations

import logging

import pytest

from wayfinder.logging_config import setup_logging


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    package = logging.getLogger("wayfinder")
    saved_root = (root.level, list(root.handlers))
    saved_package = list(package.handlers)
    yield
    for handler in package.handlers:
        if handler not in saved_package:
            handler.close()
    package.handlers[:] = saved_package
    root.setLevel(saved_root[0])
    root.handlers[:] = saved_root[1]


def test_file_handler_writes_package_records(tmp_path, restore_logging) -> None:
    setup_logging(log_dir=tmp_path)
    logging.getLogger("wayfinder.graph_builder").warning("Dropping edge %s -> %s", "a", "b")
    for handler in logging.getLogger("wayfinder").handlers:
        handler.flush()

    text = (tmp_path / "wayfinder.log").read_text(encoding="utf-8")
    assert "Dropping edge a -> b" in text
    assert "wayfinder.graph_builder" in text
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_console_only_when_log_dir_disabled(tmp_path, restore_logging) -> None:
    setup_logging(console_level=logging.WARNING, log_dir=None)

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.handlers[0].level == logging.WARNING
    assert not list(tmp_path.iterdir())
