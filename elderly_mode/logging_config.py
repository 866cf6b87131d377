import logging
import sys

from elderly_mode.config import CONFIG

RESULT_LEVEL = 35


def add_logging_level(level_name: str, level_num: int, method_name: str | None = None) -> None:
	"""
	Add a new logging level to the `logging` module and the currently configured logging class.

	Raises AttributeError if the level name is already an attribute of the `logging` module
	or if the method name is already present.
	"""
	if not method_name:
		method_name = level_name.lower()

	if hasattr(logging, level_name):
		raise AttributeError(f'{level_name} already defined in logging module')
	if hasattr(logging, method_name):
		raise AttributeError(f'{method_name} already defined in logging module')
	if hasattr(logging.getLoggerClass(), method_name):
		raise AttributeError(f'{method_name} already defined in logger class')

	def log_for_level(self, message, *args, **kwargs):
		if self.isEnabledFor(level_num):
			self._log(level_num, message, args, **kwargs)

	def log_to_root(message, *args, **kwargs):
		logging.log(level_num, message, *args, **kwargs)

	logging.addLevelName(level_num, level_name)
	setattr(logging, level_name, level_num)
	setattr(logging.getLoggerClass(), method_name, log_for_level)
	setattr(logging, method_name, log_to_root)


class ElderlyModeFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:
		# elderly_mode.session.service -> session.service
		if isinstance(record.name, str) and record.name.startswith('elderly_mode.'):
			record.name = record.name.removeprefix('elderly_mode.')
		return super().format(record)


def setup_logging(stream=None, log_level: str | None = None, force_setup: bool = False) -> logging.Logger:
	"""Configure logging for elderly-mode once.

	Args:
		stream: Output stream for logs (default: sys.stdout)
		log_level: Overrides ELDERLY_MODE_LOGGING_LEVEL ('result', 'info', 'debug', ...)
		force_setup: Reconfigure even if the root logger already has handlers
	"""
	try:
		add_logging_level('RESULT', RESULT_LEVEL)
	except AttributeError:
		pass  # already registered

	log_type = log_level or CONFIG.ELDERLY_MODE_LOGGING_LEVEL

	if logging.getLogger().hasHandlers() and not force_setup:
		return logging.getLogger('elderly_mode')

	root = logging.getLogger()
	root.handlers = []

	console = logging.StreamHandler(stream or sys.stdout)
	if log_type == 'result':
		console.setLevel(RESULT_LEVEL)
		console.setFormatter(ElderlyModeFormatter('%(message)s'))
	else:
		console.setFormatter(ElderlyModeFormatter('%(levelname)-8s [%(name)s] %(message)s'))
	root.addHandler(console)

	if log_type == 'result':
		root.setLevel(RESULT_LEVEL)
	elif log_type == 'debug':
		root.setLevel(logging.DEBUG)
	else:
		root.setLevel(logging.INFO)

	package_logger = logging.getLogger('elderly_mode')
	package_logger.propagate = False
	package_logger.handlers = [console]
	package_logger.setLevel(root.level)

	# Silence third-party loggers
	for logger_name in ['httpx', 'httpcore', 'bubus', 'charset_normalizer', 'asyncio']:
		third_party = logging.getLogger(logger_name)
		third_party.setLevel(logging.ERROR)
		third_party.propagate = False

	return package_logger
