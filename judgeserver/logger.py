"""Logging of the judge: records go through a queue, a listener thread writes them out."""
import logging
import queue
import sys
from logging.handlers import RotatingFileHandler, QueueListener, QueueHandler
from os import PathLike

import settings


class LoggerManager:
    """
    Owns the judge logger and its output handlers.

    Judging runs on the event loop, so the logger itself only puts records on a queue.
    The rotating log file (and stderr, if ``console`` is set) is written by a
    ``QueueListener`` thread between ``start`` and ``stop``.
    """

    def __init__(self,
                 logger_name: str,
                 file: str | PathLike[str],
                 level: int | str,
                 console: bool = False,
                 max_bytes: int = 1000000,
                 backup_count: int = 5):
        self.log_queue = queue.Queue()
        self.queue_handler = QueueHandler(self.log_queue)

        self.judge_logger = logging.Logger(logger_name, self.parse_level(level))
        self.judge_logger.addHandler(self.queue_handler)

        self.outputs: list[logging.Handler] = [
            RotatingFileHandler(file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
        ]
        if console:
            self.outputs.append(logging.StreamHandler(sys.stderr))
        self.queue_listener = QueueListener(self.log_queue, *self.outputs, respect_handler_level=True)
        self._running = False

    @classmethod
    def from_settings(cls, logger_name: str) -> 'LoggerManager':
        manager = cls(logger_name,
                      settings.LOG_FILE,
                      settings.LOG_LEVEL,
                      console=settings.LOG_TO_CONSOLE,
                      max_bytes=settings.LOG_MAX_BYTES,
                      backup_count=settings.LOG_BACKUP_COUNT)
        manager.set_formatter(settings.LOGGER_PROMPT)
        return manager

    @staticmethod
    def parse_level(level: int | str) -> int:
        """Accepts a level number or a level name in any case, e.g. ``'debug'``."""
        if isinstance(level, int):
            return level
        value = logging.getLevelName(level.strip().upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown log level '{level}'")
        return value

    @property
    def logger(self) -> logging.Logger:
        return self.judge_logger

    @property
    def running(self) -> bool:
        return self._running

    def set_formatter(self, format_: str):
        # records are formatted before they are queued, outputs write them as they are
        self.queue_handler.setFormatter(logging.Formatter(format_))

    def start(self):
        if self._running:
            return
        self.queue_listener.start()
        self._running = True

    def stop(self):
        """Flushes queued records and closes the outputs. Calling it again does nothing."""
        if not self._running:
            return
        self.queue_listener.stop()
        self._running = False
        for handler in self.outputs:
            handler.close()
        self.queue_handler.close()
