import logging

from workflow_snapshot.utils import LOG_HANDLER_NAME, setup_logging, stringify_small, truncate_value


def test_setup_logging_replaces_its_own_handler_only():
	root_logger = logging.getLogger()
	original_handlers = list(root_logger.handlers)
	original_level = root_logger.level
	other = logging.NullHandler()
	root_logger.addHandler(other)
	try:
		setup_logging('debug')
		setup_logging('warning')

		named = [h for h in root_logger.handlers if h.name == LOG_HANDLER_NAME]
		assert len(named) == 1
		assert other in root_logger.handlers
		assert root_logger.level == logging.WARNING
	finally:
		root_logger.handlers[:] = original_handlers
		root_logger.setLevel(original_level)


def test_stringify_small_cuts_long_values():
	assert stringify_small({'a': 1}) == '{"a":1}'
	assert stringify_small('x' * 10, max_length=4) == '"xxx…'


def test_truncate_value():
	assert truncate_value('short') == 'short'
	assert truncate_value('y' * 60) == 'y' * 50 + '...'
