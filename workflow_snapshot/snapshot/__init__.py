"""
Accessibility snapshot parsing and filtering.

- parser: descriptor lines and decoded YAML into a forest of AccessibilityNode
- service: role/text/attribute matching, JSON serialization and the size ceiling
"""

from workflow_snapshot.snapshot.parser import build_forest, parse_descriptor, parse_snapshot
from workflow_snapshot.snapshot.service import SnapshotFilterService, find_matches
from workflow_snapshot.snapshot.views import AccessibilityNode, FilterQuery, FilterResult, SnapshotFilter

__all__ = [
	'AccessibilityNode',
	'FilterQuery',
	'FilterResult',
	'SnapshotFilter',
	'SnapshotFilterService',
	'build_forest',
	'find_matches',
	'parse_descriptor',
	'parse_snapshot',
]
