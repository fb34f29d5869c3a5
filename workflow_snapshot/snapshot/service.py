from __future__ import annotations

import functools
import logging
import re
from typing import Dict, List, Literal, Optional

import orjson

from workflow_snapshot.config import get_max_json_chars
from workflow_snapshot.snapshot.exceptions import InvalidTextMatchError, SnapshotFilterError
from workflow_snapshot.snapshot.parser import nodes_from_json, parse_snapshot
from workflow_snapshot.snapshot.views import (
	AccessibilityNode,
	ContainsTextMatch,
	EqualsTextMatch,
	FilterQuery,
	FilterResult,
	RegexTextMatch,
	SnapshotFilterInput,
	TextMatch,
)
from workflow_snapshot.utils import stringify_small
from workflow_snapshot.variables.service import VariableStore

logger = logging.getLogger(__name__)

SourceKind = Literal['raw', 'json']

# JavaScript regex flags mapped onto the re module; g/y/u have no bearing on a single search
REGEX_FLAGS = {
	'i': re.IGNORECASE,
	'm': re.MULTILINE,
	's': re.DOTALL,
	'g': 0,
	'y': 0,
	'u': 0,
}

NARROW_FILTER_HINT = (
	"Narrow your filter: restrict 'role'/'text'/'attributes', avoid 'includeSubtree' unless required, or set 'maxResults'."
)


def _normalize(value: str) -> str:
	return value.lower().strip()


@functools.lru_cache(maxsize=128)
def compile_text_regex(pattern: str, flags: Optional[str] = None) -> re.Pattern:
	"""Compile *pattern* with JavaScript-style *flags* ('i', 'm', 's', ...)."""
	re_flags = 0
	for flag in flags or '':
		if flag not in REGEX_FLAGS:
			raise InvalidTextMatchError(f"Invalid regex flag '{flag}' in '{flags}'")
		re_flags |= REGEX_FLAGS[flag]
	try:
		return re.compile(pattern, re_flags)
	except re.error as e:
		raise InvalidTextMatchError(f"Invalid regex '{pattern}': {e}") from e


def text_matches(candidate: Optional[str], matcher: Optional[TextMatch]) -> bool:
	"""Test a node's accessible name against a text matcher.

	Comparison always runs on the lowercased, trimmed candidate. For regex
	matchers this means upper-case literals in the pattern can only match when
	the 'i' flag is given.
	"""
	if matcher is None:
		return True
	if candidate is None:
		return False

	normalized = _normalize(candidate)
	if isinstance(matcher, EqualsTextMatch):
		return normalized == _normalize(matcher.equals)
	if isinstance(matcher, ContainsTextMatch):
		return _normalize(matcher.contains) in normalized
	if isinstance(matcher, RegexTextMatch):
		return compile_text_regex(matcher.regex, matcher.flags).search(normalized) is not None
	return False


def attributes_match(candidate: Dict[str, str], required: Optional[Dict[str, str]]) -> bool:
	"""Every required key must be present with an equal (case-insensitive) value."""
	if not required:
		return True
	for key, value in required.items():
		if key not in candidate:
			return False
		if _normalize(candidate[key]) != _normalize(value):
			return False
	return True


def clone_node(node: AccessibilityNode, include_subtree: bool = True) -> AccessibilityNode:
	"""Detached copy of *node*; children are deep-copied or dropped."""
	return AccessibilityNode(
		role=node.role,
		text=node.text,
		attributes=dict(node.attributes),
		children=[clone_node(child) for child in node.children] if include_subtree else [],
		rawDescriptor=node.rawDescriptor,
	)


def find_matches(nodes: List[AccessibilityNode], query: FilterQuery) -> List[AccessibilityNode]:
	"""Collect matching nodes in document (pre-order) order.

	In 'first' mode traversal halts after the first match. In 'all' mode the
	children of a matched node are still visited, and traversal halts once
	maxResults matches are collected.
	"""
	roles = query.filter.role_set()
	text = query.filter.text
	attributes = query.filter.attributes
	results: List[AccessibilityNode] = []

	def visit(node: AccessibilityNode) -> bool:
		if (
			(roles is None or node.role in roles)
			and text_matches(node.text, text)
			and attributes_match(node.attributes, attributes)
		):
			results.append(clone_node(node, include_subtree=query.includeSubtree))
			if query.mode == 'first':
				return True
			if query.maxResults and len(results) >= query.maxResults:
				return True

		for child in node.children:
			if visit(child):
				return True
		return False

	for node in nodes:
		if visit(node):
			break

	return results


def serialize_matches(matches: List[AccessibilityNode]) -> str:
	"""JSON with two-space indentation; absent text is omitted."""
	records = [match.model_dump(exclude_none=True) for match in matches]
	return orjson.dumps(records, option=orjson.OPT_INDENT_2).decode('utf-8')


class SnapshotFilterService:
	"""Filters accessibility snapshots held in a VariableStore.

	Every failure (missing variable, undecodable source, bad regex, oversized
	result) comes back as a ``FilterResult`` with ``success=False`` so an agent
	can read the reason and retry with a narrower query.
	"""

	def __init__(self, store: VariableStore | None = None, max_chars: int | None = None) -> None:
		self.store = store if store is not None else VariableStore()
		self.max_chars = max_chars if max_chars is not None else get_max_json_chars()

	def filter_source(self, source: str, source_kind: SourceKind, query: FilterQuery) -> FilterResult:
		"""Decode *source* and filter it; the store is not touched."""
		try:
			if isinstance(query.filter.text, RegexTextMatch):
				compile_text_regex(query.filter.text.regex, query.filter.text.flags)
			forest = nodes_from_json(source) if source_kind == 'json' else parse_snapshot(source)
			matches = find_matches(forest, query)
		except SnapshotFilterError as e:
			logger.warning(f'Snapshot filter failed: {e}')
			return FilterResult.fail(str(e))

		try:
			payload = serialize_matches(matches)
		except orjson.JSONEncodeError as e:
			# e.g. lone surrogates from a YAML "\ud800" escape
			logger.warning(f'Snapshot filter failed: could not serialize {len(matches)} matches: {e}')
			return FilterResult.fail(f'Failed to serialize result: {e}', count=len(matches))

		# Enforce size limit to encourage narrower filters
		if len(payload) > self.max_chars:
			reason = f'Filtered result too large ({len(payload)} > {self.max_chars} chars). {NARROW_FILTER_HINT}'
			logger.warning(f'⚠️ {len(matches)} matches serialize to {len(payload)} chars, over the {self.max_chars} limit')
			return FilterResult.fail(reason, count=len(matches))

		return FilterResult.ok(count=len(matches), payload=payload)

	def filter_variable(
		self,
		variable: str,
		query: FilterQuery,
		source_kind: SourceKind = 'raw',
		store_result_as: str | None = None,
	) -> FilterResult:
		"""Filter the snapshot stored under *variable*, optionally storing the JSON result."""
		raw = self.store.get(variable)
		if not raw:
			return FilterResult.fail(f"Variable '{variable}' not found")

		result = self.filter_source(raw, source_kind, query)
		if result.success and store_result_as:
			self.store.set(store_result_as, result.payload)
			logger.info(f"📦 Stored {result.count} matches in variable '{store_result_as}'")
		return result

	def run(self, params: SnapshotFilterInput) -> FilterResult:
		logger.debug(f'snapshot filter args: {stringify_small(params.model_dump(exclude_none=True))}')
		result = self.filter_variable(
			params.variable,
			params.to_query(),
			source_kind=params.sourceKind,
			store_result_as=params.storeResultAs,
		)
		logger.debug(f'snapshot filter result: {stringify_small(result.to_output())}')
		return result
