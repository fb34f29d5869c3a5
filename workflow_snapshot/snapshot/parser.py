"""
Accessibility snapshot parsing.

Playwright serializes the accessibility tree as YAML where every entry is a
descriptor line such as::

	- table "Bookings":
	  - row "Item A" [kind=a] [checked]
	  - link "Sign in":
	    - /url: "#"

Decoding happens in two stages: PyYAML turns the text into plain lists,
strings and mappings, then ``to_structure`` tags each piece as a
``DescriptorLine``, ``NodeList``, ``KeyedSubtree`` or ``PropertyEntry`` so
``build_forest`` can dispatch on the tag instead of inspecting shapes.

The descriptor parser is total: malformed lines fall back to the generic role,
no text and no attributes rather than raising.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

import orjson
import yaml
from pydantic import ValidationError

from workflow_snapshot.config import GENERIC_ROLE
from workflow_snapshot.snapshot.exceptions import SnapshotDecodeError
from workflow_snapshot.snapshot.views import AccessibilityNode, Descriptor

logger = logging.getLogger(__name__)

ROLE_PATTERN = re.compile(r'^(\w+)')
# First double-quoted segment, honouring backslash-escaped quotes inside it
TEXT_PATTERN = re.compile(r'"((?:[^"\\]|\\.)*)"')
ATTRIBUTE_PATTERN = re.compile(r'\[([^\]]+)\]')
ESCAPE_PATTERN = re.compile(r'\\(["\\])')

# Keys like "/url" or "/placeholder" carry element properties, not nodes
PROPERTY_KEY_PREFIX = '/'


def parse_descriptor(line: str) -> Descriptor:
	"""Parse ``role "text" [key=value] [flag]`` into a Descriptor."""
	role_match = ROLE_PATTERN.match(line)
	role = role_match.group(1) if role_match else GENERIC_ROLE

	text_match = TEXT_PATTERN.search(line)
	text = ESCAPE_PATTERN.sub(r'\1', text_match.group(1)) if text_match else None

	attributes = {}
	for part in ATTRIBUTE_PATTERN.findall(line):
		key, sep, value = part.partition('=')
		key = key.strip()
		if not key:
			continue
		attributes[key] = value.strip() if sep else 'true'

	return Descriptor(role=role, text=text, attributes=attributes)


# --- Decoded structure ---


@dataclass(frozen=True)
class DescriptorLine:
	"""A plain string entry: a leaf node."""

	line: str


@dataclass(frozen=True)
class NodeList:
	"""A sequence of sibling entries."""

	items: Tuple[Structure, ...]


@dataclass(frozen=True)
class KeyedSubtree:
	"""A single-key mapping ``{descriptor: children}``."""

	descriptor: str
	children: NodeList


@dataclass(frozen=True)
class PropertyEntry:
	"""Anything that is not an accessibility node (``/url: ...``, scalars, empty documents)."""

	value: Any


Structure = Union[DescriptorLine, NodeList, KeyedSubtree, PropertyEntry]


def to_structure(data: Any) -> Structure:
	"""Tag plain decoder output (str / list / dict) with its structural role.

	A single-key mapping is a ``KeyedSubtree`` whatever its value, so
	``paragraph: Hello`` and ``heading "X":`` (null value) become childless
	nodes. Playwright's MCP filter tool only treats keys with a list value as
	nodes and drops these, so role counts here can be higher than its.
	"""
	if isinstance(data, str):
		return DescriptorLine(data)

	if isinstance(data, list):
		return NodeList(tuple(to_structure(item) for item in data))

	if isinstance(data, dict) and len(data) == 1:
		key, value = next(iter(data.items()))
		key = str(key)
		if not key.startswith(PROPERTY_KEY_PREFIX):
			# Inline scalar values (e.g. "paragraph: Hello") carry no child nodes
			children = to_structure(value) if isinstance(value, list) else NodeList(())
			return KeyedSubtree(key, children)

	return PropertyEntry(data)


def _node_from_line(line: str, children: List[AccessibilityNode]) -> AccessibilityNode:
	descriptor = parse_descriptor(line)
	return AccessibilityNode(
		role=descriptor.role,
		text=descriptor.text,
		attributes=descriptor.attributes,
		children=children,
		rawDescriptor=line,
	)


def build_forest(structure: Structure | Any) -> List[AccessibilityNode]:
	"""Build the ordered list of root nodes from a decoded snapshot.

	Accepts either a tagged ``Structure`` or plain decoder output, which is
	tagged first. The input is never mutated; every call builds fresh nodes.
	"""
	if not isinstance(structure, (DescriptorLine, NodeList, KeyedSubtree, PropertyEntry)):
		structure = to_structure(structure)

	if isinstance(structure, DescriptorLine):
		return [_node_from_line(structure.line, [])]

	if isinstance(structure, NodeList):
		nodes: List[AccessibilityNode] = []
		for item in structure.items:
			nodes.extend(build_forest(item))
		return nodes

	if isinstance(structure, KeyedSubtree):
		return [_node_from_line(structure.descriptor, build_forest(structure.children))]

	return []


# --- Source decoders ---


def decode_snapshot(raw: str) -> Structure:
	"""Decode raw snapshot YAML into a tagged structure."""
	try:
		data = yaml.safe_load(raw)
	except yaml.YAMLError as e:
		raise SnapshotDecodeError('YAML', str(e)) from e
	return to_structure(data)


def parse_snapshot(raw: str) -> List[AccessibilityNode]:
	"""Raw snapshot text to forest."""
	forest = build_forest(decode_snapshot(raw))
	logger.debug(f'Parsed snapshot into {len(forest)} root nodes')
	return forest


def nodes_from_json(raw: str) -> List[AccessibilityNode]:
	"""Decode a previously serialized match list back into nodes."""
	try:
		data = orjson.loads(raw)
	except orjson.JSONDecodeError as e:
		raise SnapshotDecodeError('JSON', str(e)) from e

	if isinstance(data, dict):
		data = [data]
	if not isinstance(data, list):
		raise SnapshotDecodeError('JSON', f'expected a list of nodes, got {type(data).__name__}')

	try:
		return [AccessibilityNode.model_validate(item) for item in data]
	except ValidationError as e:
		raise SnapshotDecodeError('JSON', f'invalid node record: {e.errors()[0]["msg"]}') from e
