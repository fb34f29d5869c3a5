from __future__ import annotations

from typing import Dict, List, Literal, Optional, Set, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# --- Parsed snapshot nodes ---


class Descriptor(BaseModel):
	"""Identity of one accessibility node, parsed from a single structural line."""

	role: str = Field(..., description="Accessibility role, e.g. 'row', 'link', 'heading'.")
	text: Optional[str] = Field(None, description='Accessible name (first quoted segment), if any.')
	attributes: Dict[str, str] = Field(default_factory=dict, description='Bracketed [key=value] pairs; flags map to "true".')


class AccessibilityNode(Descriptor):
	"""A descriptor plus its position in the snapshot tree."""

	children: List[AccessibilityNode] = Field(default_factory=list)
	rawDescriptor: str = Field('', description='The original unparsed descriptor line.')


AccessibilityNode.model_rebuild()


# --- Text matchers ---
# extra='forbid' keeps the union unambiguous: {"contains": ...} never validates as equals


class EqualsTextMatch(BaseModel):
	"""Case-insensitive full match after trimming surrounding whitespace."""

	model_config = ConfigDict(extra='forbid')

	equals: str


class ContainsTextMatch(BaseModel):
	"""Case-insensitive substring match after trimming surrounding whitespace."""

	model_config = ConfigDict(extra='forbid')

	contains: str


class RegexTextMatch(BaseModel):
	"""Regular expression searched against the lowercased, trimmed text."""

	model_config = ConfigDict(extra='forbid')

	regex: str
	flags: Optional[str] = Field(None, description="JavaScript-style flags, e.g. 'i' or 'im'.")


TextMatch = Union[EqualsTextMatch, ContainsTextMatch, RegexTextMatch]


# --- Filter specification ---


class SnapshotFilter(BaseModel):
	"""Role/text/attribute predicate. Absent predicates always pass."""

	role: Optional[Union[str, List[str]]] = Field(
		None, description="Filter by accessibility role (e.g., 'table', 'link', 'row')."
	)
	text: Optional[TextMatch] = Field(
		None, description='Filter by accessible name/text using equals, contains, or regex.'
	)
	attributes: Optional[Dict[str, str]] = Field(
		None, description='Match descriptor attributes like level=4, cursor=pointer.'
	)

	def role_set(self) -> Optional[Set[str]]:
		if isinstance(self.role, list):
			return set(self.role)
		if self.role:
			return {self.role}
		return None


class FilterQuery(BaseModel):
	"""A filter plus the traversal controls governing one filtering call."""

	filter: SnapshotFilter = Field(
		default_factory=SnapshotFilter,
		description='Filter by accessibility role/text/attributes. Make sure to use the most specific filter possible.',
	)
	includeSubtree: bool = Field(
		False,
		description='Include the full subtree of matched nodes. Expensive, should be used when absolutely necessary.',
	)
	mode: Literal['first', 'all'] = Field('all', description='Return only the first match or all matches.')
	maxResults: Optional[int] = Field(None, gt=0, description='Limit the number of returned matches.')


class SnapshotFilterInput(FilterQuery):
	"""Tool input: where to read the source, how to decode it and where to store the result."""

	variable: str = Field(..., description='Name of the variable that holds the snapshot or a previous JSON result.')
	sourceKind: Literal['raw', 'json'] = Field('raw', description="'raw' for a YAML snapshot, 'json' for a stored match list.")
	storeResultAs: Optional[str] = Field(
		None,
		validation_alias=AliasChoices('storeResultAs', 'storeInVariable'),
		description='If provided, store the JSON result in this variable name.',
	)

	def to_query(self) -> FilterQuery:
		return FilterQuery(
			filter=self.filter,
			includeSubtree=self.includeSubtree,
			mode=self.mode,
			maxResults=self.maxResults,
		)


# --- Result ---


class FilterResult(BaseModel):
	"""Tagged outcome of a filtering call; failures carry a reason instead of a payload."""

	success: bool
	count: int = Field(0, ge=0)
	payload: Optional[str] = Field(None, description='Serialized JSON match list (success only).')
	reason: Optional[str] = Field(None, description='Human-readable failure explanation.')

	@classmethod
	def ok(cls, count: int, payload: str) -> FilterResult:
		return cls(success=True, count=count, payload=payload)

	@classmethod
	def fail(cls, reason: str, count: int = 0) -> FilterResult:
		return cls(success=False, count=count, reason=reason)

	def to_output(self) -> dict:
		return self.model_dump(exclude_none=True)
