class SnapshotFilterError(Exception):
	"""Base class for errors raised while preparing a filtering call."""


class SnapshotDecodeError(SnapshotFilterError):
	"""The source content could not be decoded into a snapshot tree."""

	def __init__(self, format_name: str, message: str):
		self.format_name = format_name
		self.message = message
		super().__init__(f'Failed to parse {format_name}: {message}')


class InvalidTextMatchError(SnapshotFilterError):
	"""A regex text matcher could not be compiled."""
