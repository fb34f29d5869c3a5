from typing import Optional

from pydantic import BaseModel, Field


class CaptureResult(BaseModel):
	"""Outcome of saving a page snapshot into a variable."""

	success: bool
	variable: Optional[str] = Field(None, description='Variable the snapshot was saved under.')
	chars: int = Field(0, description='Length of the saved snapshot.')
	reason: Optional[str] = None
