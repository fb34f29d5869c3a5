from typing import List, Optional

from pydantic import BaseModel, Field


class StoreVariableParams(BaseModel):
	name: str = Field(..., description='The name of the variable to store')
	value: str = Field(..., description='The value of the variable to store')
	overwrite: bool = Field(False, description='Whether to overwrite the variable if it already exists')


class VariableResult(BaseModel):
	"""Outcome of a store/retrieve call."""

	success: bool = Field(..., description='Whether the operation succeeded')
	value: Optional[str] = Field(None, description='The value of the variable, if retrieved')
	reason: Optional[str] = Field(None, description='The reason for the failure')


class VariableList(BaseModel):
	names: List[str] = Field(default_factory=list)
