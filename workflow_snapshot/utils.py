import logging

import orjson

from workflow_snapshot.config import LOG_FORMAT, LOG_PREVIEW_CHARS

LOG_HANDLER_NAME = 'workflow_snapshot'


def stringify_small(value, max_length: int = LOG_PREVIEW_CHARS) -> str:
	"""Serialize *value* for a log line, cutting it to *max_length* characters."""
	try:
		text = orjson.dumps(value, default=str).decode('utf-8')
	except TypeError:
		text = str(value)
	return text if len(text) <= max_length else f'{text[:max_length]}…'


def truncate_value(value: str, max_length: int = 50) -> str:
	"""Shorten a stored value for display, adding ellipsis if truncated."""
	return value if len(value) <= max_length else f'{value[:max_length]}...'


def setup_logging(level: str = 'INFO') -> None:
	"""Route log records to stderr with the shared format."""
	root_logger = logging.getLogger()
	# Replace rather than reuse: stderr may have been swapped since the last call
	for handler in [h for h in root_logger.handlers if h.name == LOG_HANDLER_NAME]:
		root_logger.removeHandler(handler)

	handler = logging.StreamHandler()
	handler.name = LOG_HANDLER_NAME
	handler.setFormatter(logging.Formatter(LOG_FORMAT))
	root_logger.addHandler(handler)
	root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
