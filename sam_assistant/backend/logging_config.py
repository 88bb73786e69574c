from __future__ import annotations

import logging
import sys

from sam_assistant.backend import config


_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging() -> None:
	"""Install a single stdout handler on the root logger.

	Safe to call more than once; earlier handlers are replaced rather than stacked.
	"""
	root_logger = logging.getLogger()
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	handler = logging.StreamHandler(sys.stdout)
	handler.setFormatter(
		logging.Formatter(
			"%(asctime)s - %(name)s - %(levelname)s - %(message)s",
			datefmt="%Y-%m-%d %H:%M:%S",
		)
	)
	root_logger.addHandler(handler)
	root_logger.setLevel(getattr(logging, config.log_level(), logging.INFO))

	for name in _NOISY_LOGGERS:
		logging.getLogger(name).setLevel(logging.WARNING)
