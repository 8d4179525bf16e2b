"""
System Reporter - the one logger every component writes through.

Lines go to stdout (container logs) and, when a directory is given, to
``<log_dir>/<name>.log`` as well. Each call carries a context tag and a
verbose level; calls above the configured verbosity are skipped before
they reach the logging module.
"""

import logging
import os
import sys
import threading
import time
from typing import Optional

LOG_RETENTION_DAYS = 1
RETENTION_SWEEP_SECONDS = 3600

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MIN_VERBOSE = 0
MAX_VERBOSE = 3


def _clamp_verbose(value: int) -> int:
    return max(MIN_VERBOSE, min(MAX_VERBOSE, value))


class SystemReporter:
    """
    Context-tagged logger with a verbosity gate.

    Verbose levels:
        0 = errors and lifecycle events only
        1 = normal operation (default)
        2 = per-session detail
        3 = per-event debug output
    """

    def __init__(
        self,
        name: str = "system",
        log_dir: Optional[str] = None,
        level: int = logging.INFO,
        verbose: int = 1,
        retention: bool = True,
    ) -> None:
        """
        Args:
            name: Logger name, also the log file stem
            log_dir: Directory for the log file; stdout only when None
            level: Threshold handed to the logging module
            verbose: Verbosity gate (0-3)
            retention: Truncate the log file once it is older than a day
        """
        self.name = name
        self.verbose = _clamp_verbose(verbose)
        self.log_file: Optional[str] = None

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False
        # Re-creating a reporter with the same name must not double output
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        stdout = logging.StreamHandler(sys.stdout)
        stdout.setFormatter(formatter)
        self.logger.addHandler(stdout)

        if log_dir:
            self._attach_file(log_dir, formatter, retention)

    def _attach_file(
        self, log_dir: str, formatter: logging.Formatter, retention: bool
    ) -> None:
        directory = os.path.abspath(log_dir)
        os.makedirs(directory, exist_ok=True)
        self.log_file = os.path.join(directory, f"{self.name}.log")

        handler = logging.FileHandler(self.log_file, encoding="utf-8")
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

        if retention:
            threading.Thread(
                target=self._sweep_forever,
                daemon=True,
                name=f"{self.name}-log-retention",
            ).start()

    def _sweep_forever(self) -> None:
        while True:
            self.sweep_log_file()
            time.sleep(RETENTION_SWEEP_SECONDS)

    def sweep_log_file(self) -> bool:
        """
        Empty the log file if it was last written too long ago.

        Returns:
            True if the file was truncated
        """
        if not self.log_file:
            return False

        try:
            modified = os.path.getmtime(self.log_file)
        except OSError:
            return False

        if (time.time() - modified) / 86400 <= LOG_RETENTION_DAYS:
            return False

        try:
            with open(self.log_file, "w", encoding="utf-8"):
                pass
        except OSError as e:
            print(f"Log retention failed for {self.log_file}: {e}", file=sys.stderr)
            return False

        return True

    def set_verbose(self, level: int) -> None:
        """Change the verbosity gate at runtime."""
        self.verbose = _clamp_verbose(level)
        self.info(
            f"Verbose level is now {self.verbose}",
            context="SystemReporter",
            verbose_level=0,
        )

    def _emit(self, level: int, msg: str, context: str, verbose_level: int) -> None:
        if verbose_level <= self.verbose:
            self.logger.log(level, f"[{context}] {msg}")

    def debug(self, msg: str, context: str = "system", verbose_level: int = 3) -> None:
        self._emit(logging.DEBUG, msg, context, verbose_level)

    def info(self, msg: str, context: str = "system", verbose_level: int = 1) -> None:
        self._emit(logging.INFO, msg, context, verbose_level)

    def warning(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        self._emit(logging.WARNING, msg, context, verbose_level)

    def error(self, msg: str, context: str = "system", verbose_level: int = 0) -> None:
        self._emit(logging.ERROR, msg, context, verbose_level)

    def critical(
        self, msg: str, context: str = "system", verbose_level: int = 0
    ) -> None:
        self._emit(logging.CRITICAL, msg, context, verbose_level)
