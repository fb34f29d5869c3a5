"""
Snapshot Filter Configuration

Centralized settings for the accessibility snapshot filter: the payload
ceiling handed back to tool callers, logging defaults and browser capture
options. Every value can be overridden through the environment.
"""

import os

# Hard ceiling on the serialized JSON payload, measured in characters
DEFAULT_MAX_JSON_CHARS = 30_000

# Role used when a descriptor line has no leading word
GENERIC_ROLE = 'generic'

# Log previews of tool args/results are cut to this many characters
LOG_PREVIEW_CHARS = 500

LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s] %(message)s'


def _env_int(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or not raw.strip():
		return default
	try:
		value = int(raw)
	except ValueError:
		return default
	return value if value > 0 else default


def _env_bool(name: str, default: bool) -> bool:
	raw = os.getenv(name)
	if raw is None:
		return default
	return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def get_max_json_chars() -> int:
	"""Payload ceiling, WORKFLOW_SNAPSHOT_MAX_JSON_CHARS overrides the default."""
	return _env_int('WORKFLOW_SNAPSHOT_MAX_JSON_CHARS', DEFAULT_MAX_JSON_CHARS)


def get_log_level() -> str:
	return os.getenv('WORKFLOW_SNAPSHOT_LOG_LEVEL', 'INFO').upper()


def get_headless() -> bool:
	return _env_bool('WORKFLOW_SNAPSHOT_HEADLESS', True)


__all__ = [
	'DEFAULT_MAX_JSON_CHARS',
	'GENERIC_ROLE',
	'LOG_PREVIEW_CHARS',
	'LOG_FORMAT',
	'get_max_json_chars',
	'get_log_level',
	'get_headless',
]
