"""Logging helpers built on top of loguru."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, TypeVar, cast

from loguru import logger as _logger
from loguru._logger import Logger as LoguruLogger
from tqdm.auto import tqdm

from utils.settings import logging as LOGCFG

LoggerType = LoguruLogger
T = TypeVar("T")

_is_configured = False
_log_dir = LOGCFG.log_dir
_log_file = None


class Logger:
    """Project-wide logger wrapper using loguru and global config."""

    @staticmethod
    def _configure(level: str, json_format: bool) -> None:
        """Replace all sinks with a console sink and a per-run file sink."""
        global _is_configured, _log_file
        _logger.remove()
        os.makedirs(_log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        suffix = ".log.json" if json_format else ".log"
        _log_file = _log_dir / f"surfaces_{timestamp}{suffix}"
        _logger.add(sys.stdout, level=level, format=LOGCFG.log_format)
        # worker threads log concurrently
        _logger.add(
            _log_file,
            level=level,
            serialize=json_format,
            format=LOGCFG.log_file_format,
            enqueue=True,
        )
        _is_configured = True

    @staticmethod
    def get_logger(name: str) -> LoguruLogger:
        """Return a loguru logger bound to component ``name``."""
        if not _is_configured:
            Logger._configure(LOGCFG.level, LOGCFG.json)
        return _logger.bind(module=name)

    @staticmethod
    def progress(
        iterable: Iterable[T],
        desc: str | None = None,
        total: int | None = None,
    ) -> Iterable[T]:
        """Return a tqdm iterator with unified style."""
        return cast(
            Iterable[T],
            tqdm(
                iterable,
                desc=desc,
                total=total,
                leave=False,
                bar_format=LOGCFG.progress_bar_format,
            ),
        )

    @staticmethod
    def configure(
        level: str | None = None,
        log_dir: str | Path | None = None,
        json_format: bool | None = None,
    ) -> None:
        """Reconfigure sinks; omitted arguments keep the settings defaults."""
        global _log_dir
        if log_dir is not None:
            _log_dir = Path(log_dir)
        Logger._configure(
            level or LOGCFG.level,
            json_format if json_format is not None else LOGCFG.json,
        )

    @staticmethod
    def log_file() -> Path | None:
        """Return the file sink of the current run."""
        return _log_file
