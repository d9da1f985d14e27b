"""Project logging setup.

Provides a single `get_logger(name=None)` factory that returns a configured
logger. Configuration uses the standard library only: a console `StreamHandler`
and a date-based rotating handler writing to `logs/monitor_YYYY-MM-DD.log`.

Behavior:
- Log level is taken from the environment variable `LOG_LEVEL` (default INFO).
- Log directory is taken from `LOGS_DIR` (default `<project>/logs`).
- Rotates at midnight and archives the old file to `logs/archive/YYYY-MM-DD/`.
- Archive directories older than `LOG_RETENTION_DAYS` (default 7) are deleted.
"""
import logging
import os
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "orderflow-monitor"


class DailyRotatingFileHandler(logging.Handler):
	"""Handler that rotates log files at midnight and archives old files."""

	def __init__(self, logs_dir: str, retention_days: int = 7, prefix: str = "monitor"):
		super().__init__()
		self.logs_dir = Path(logs_dir)
		self.retention_days = retention_days
		self.prefix = prefix  # e.g. "monitor", "ESZ5"
		self.current_date = datetime.now().strftime("%Y-%m-%d")
		self.current_handler: Optional[logging.FileHandler] = None
		self._setup_handler()

	def _setup_handler(self):
		"""Create or recreate the file handler for the current date."""
		if self.current_handler:
			self.current_handler.close()

		log_file = self.logs_dir / f"{self.prefix}_{self.current_date}.log"
		self.current_handler = logging.FileHandler(str(log_file), encoding="utf-8")

		if self.formatter:
			self.current_handler.setFormatter(self.formatter)

	def setFormatter(self, fmt):
		super().setFormatter(fmt)
		if self.current_handler:
			self.current_handler.setFormatter(fmt)

	def emit(self, record):
		"""Emit a record, rotating the file if the date has changed."""
		try:
			current_date = datetime.now().strftime("%Y-%m-%d")

			if current_date != self.current_date:
				old_date = self.current_date
				old_log_file = self.logs_dir / f"{self.prefix}_{old_date}.log"

				if self.current_handler:
					self.current_handler.close()

				if old_log_file.exists():
					archive_dir = self.logs_dir / "archive" / old_date
					archive_dir.mkdir(parents=True, exist_ok=True)
					shutil.move(str(old_log_file), str(archive_dir / old_log_file.name))
					# logger may be mid-rotation here, so print instead
					print(f"[Logger] Rotated log: archived {old_log_file.name} to archive/{old_date}/")

				_cleanup_old_archive_logs(self.logs_dir, self.retention_days)

				self.current_date = current_date
				self._setup_handler()

			if self.current_handler:
				self.current_handler.emit(record)

		except Exception:
			self.handleError(record)

	def close(self):
		"""Close the handler."""
		if self.current_handler:
			self.current_handler.close()
		super().close()


def _ensure_logs_dir(path: str) -> bool:
	try:
		os.makedirs(path, exist_ok=True)
		return True
	except OSError:
		# console-only logging is still usable
		return False


def _level_from_env() -> int:
	level_name = os.getenv("LOG_LEVEL", "INFO").upper()
	level = getattr(logging, level_name, None)
	return level if isinstance(level, int) else logging.INFO


def _logs_dir_from_env() -> str:
	logs_dir = os.getenv("LOGS_DIR")
	if not logs_dir:
		# src/orderflow_monitor/core/logger.py -> project root
		project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
		logs_dir = os.path.join(project_root, "logs")
	return logs_dir


def _retention_days_from_env() -> int:
	try:
		return int(os.getenv("LOG_RETENTION_DAYS", "7"))
	except ValueError:
		return 7


def _archive_old_logs(logs_dir: Path, today: str, prefix: str = "monitor") -> None:
	"""Move log files from previous days into the archive directory."""
	try:
		archive_dir = logs_dir / "archive"
		moved_count = 0
		head = f"{prefix}_"

		for log_file in logs_dir.glob(f"{prefix}_*.log"):
			file_date = log_file.name[len(head):-4]  # YYYY-MM-DD
			if file_date == today:
				continue

			date_archive_dir = archive_dir / file_date
			date_archive_dir.mkdir(parents=True, exist_ok=True)
			shutil.move(str(log_file), str(date_archive_dir / log_file.name))
			moved_count += 1

		if moved_count > 0:
			print(f"[Logger] Archived {moved_count} old log files")
	except OSError as e:
		print(f"[Logger] Warning: Failed to archive logs: {e}")


def _cleanup_old_archive_logs(logs_dir: Path, retention_days: Optional[int] = None) -> None:
	"""Delete archive directories older than the retention period."""
	try:
		if retention_days is None:
			retention_days = _retention_days_from_env()

		archive_dir = logs_dir / "archive"
		if not archive_dir.exists():
			return

		cutoff_str = (datetime.now() - timedelta(days=retention_days)).strftime("%Y-%m-%d")

		deleted_dirs = 0
		for date_dir in archive_dir.iterdir():
			if date_dir.is_dir() and date_dir.name < cutoff_str:
				shutil.rmtree(date_dir)
				deleted_dirs += 1

		if deleted_dirs > 0:
			print(f"[Logger] Cleaned up {deleted_dirs} archive log directories older than {retention_days} days")
	except OSError as e:
		print(f"[Logger] Warning: Failed to cleanup archive logs: {e}")


def _configure_root_logger(log_level: int, logs_dir: Optional[str]) -> None:
	root = logging.getLogger()
	if root.handlers:
		# already configured (or a test runner installed its own handlers)
		return

	root.setLevel(log_level)

	console_h = logging.StreamHandler()
	console_h.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
	root.addHandler(console_h)

	if logs_dir and _ensure_logs_dir(logs_dir):
		try:
			retention_days = _retention_days_from_env()
			today = datetime.now().strftime("%Y-%m-%d")
			base_dir = Path(logs_dir)
			_archive_old_logs(base_dir, today)
			_cleanup_old_archive_logs(base_dir, retention_days=retention_days)

			file_h = DailyRotatingFileHandler(logs_dir, retention_days=retention_days)
			file_h.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
			root.addHandler(file_h)
		except OSError as e:
			print(f"[Logger] Warning: file logging disabled: {e}")


def get_logger(name: Optional[str] = None) -> logging.Logger:
	"""Return a configured logger for `name`.

	Example:
		from orderflow_monitor.core.logger import get_logger
		log = get_logger(__name__)
		log.info("starting monitor")

	The root configuration runs once, on the first call.
	"""
	_configure_root_logger(_level_from_env(), _logs_dir_from_env())
	return logging.getLogger(name if name else ROOT_LOGGER_NAME)


def get_instrument_logger(instrument: str) -> logging.Logger:
	"""Return an instrument-specific logger that writes to its own file.

	Writes to the console and to `logs/<INSTRUMENT>_YYYY-MM-DD.log`.

	Args:
		instrument: Instrument name (e.g. "ESZ5")

	Returns:
		Configured logger instance
	"""
	level = _level_from_env()
	logs_dir = _logs_dir_from_env()

	logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{instrument}")
	logger.propagate = False
	logger.setLevel(level)

	if logger.handlers:
		return logger

	console_h = logging.StreamHandler()
	console_h.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
	logger.addHandler(console_h)

	if _ensure_logs_dir(logs_dir):
		try:
			file_h = DailyRotatingFileHandler(
				logs_dir, retention_days=_retention_days_from_env(), prefix=instrument
			)
			file_h.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(message)s", datefmt=DATE_FORMAT))
			logger.addHandler(file_h)
		except OSError as e:
			print(f"[Logger] Warning: Failed to create file handler for {instrument}: {e}")

	return logger


__all__ = ["get_logger", "get_instrument_logger", "DailyRotatingFileHandler"]
