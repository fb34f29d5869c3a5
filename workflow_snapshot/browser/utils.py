import re
from typing import Optional

YAML_FENCE_PATTERN = re.compile(r'```yaml([\s\S]*?)```')


def extract_snapshot_yaml(text: str) -> Optional[str]:
	"""Return the body of the first ```yaml fenced block in a tool response, if any."""
	match = YAML_FENCE_PATTERN.search(text)
	if not match:
		return None
	body = match.group(1)
	return body if body.strip() else None


def unwrap_snapshot_text(text: str) -> str:
	"""Accept either a bare snapshot or a tool response wrapping one in a yaml fence."""
	return extract_snapshot_yaml(text) or text
