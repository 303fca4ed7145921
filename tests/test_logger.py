"""
tests/test_logger.py

Pytest unit tests for the terminal + file Logger.
"""

from __future__ import annotations

import contextlib

from Logger import Logger


def test_strips_colors_from_file(tmp_path) -> None:
    path = tmp_path / "Logs" / "main.log"
    logger = Logger(str(path), clean=True)

    logger.write("\033[92mPage loaded\033[0m")
    logger.close()

    assert path.read_text(encoding="utf-8") == "Page loaded\n"


def test_clean_truncates_and_append_keeps(tmp_path) -> None:
    path = tmp_path / "main.log"
    path.write_text("old run\n", encoding="utf-8")

    appender = Logger(str(path))
    appender.write("second run")
    appender.close()
    assert path.read_text(encoding="utf-8") == "old run\nsecond run\n"

    cleaner = Logger(str(path), clean=True)
    cleaner.write("third run\n")
    cleaner.close()
    assert path.read_text(encoding="utf-8") == "third run\n"


def test_ignores_empty_messages_and_double_close(tmp_path) -> None:
    path = tmp_path / "main.log"
    logger = Logger(str(path), clean=True)

    logger.write("")
    logger.write(None)
    logger.flush()
    logger.close()
    logger.close()
    logger.flush()

    assert path.read_text(encoding="utf-8") == ""


def test_print_through_redirected_stdout_adds_no_blank_lines(tmp_path) -> None:
    path = tmp_path / "main.log"
    logger = Logger(str(path), clean=True)

    with contextlib.redirect_stdout(logger):
        print("Scraping started")
        print("\033[92mPage loaded\033[0m")
    logger.write("\n")
    logger.write("   ")
    logger.close()

    assert path.read_text(encoding="utf-8") == "Scraping started\nPage loaded\n"
