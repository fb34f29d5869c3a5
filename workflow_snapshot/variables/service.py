import logging
import threading
from typing import Dict, List, Optional

from workflow_snapshot.utils import stringify_small, truncate_value
from workflow_snapshot.variables.views import StoreVariableParams, VariableList, VariableResult

logger = logging.getLogger(__name__)


class VariableStore:
	"""Named string slots shared by the tools of one workflow session.

	Snapshots are saved here by the capture tools and read back by the
	filter, which can write its JSON result under a new name for chaining.
	"""

	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self._values: Dict[str, str] = dict(initial or {})
		self._lock = threading.Lock()

	def get(self, name: str) -> Optional[str]:
		with self._lock:
			return self._values.get(name)

	def set(self, name: str, value: str) -> None:
		with self._lock:
			self._values[name] = value

	def has(self, name: str) -> bool:
		with self._lock:
			return name in self._values

	def delete(self, name: str) -> bool:
		with self._lock:
			return self._values.pop(name, None) is not None

	def names(self) -> List[str]:
		with self._lock:
			return list(self._values)

	def clear(self) -> None:
		with self._lock:
			self._values.clear()

	def __contains__(self, name: str) -> bool:
		return self.has(name)

	def __len__(self) -> int:
		with self._lock:
			return len(self._values)


def store_variable(store: VariableStore, params: StoreVariableParams) -> VariableResult:
	logger.debug(
		f'store_variable args: {stringify_small({"name": params.name, "valueLength": len(params.value), "overwrite": params.overwrite})}'
	)
	if store.has(params.name) and not params.overwrite:
		logger.warning(f"Variable '{params.name}' already exists and will not be overwritten")
		return VariableResult(success=False, reason='Variable already exists')

	store.set(params.name, params.value)
	logger.info(f"📦 Variable '{params.name}' stored with value '{truncate_value(params.value)}'")
	return VariableResult(success=True)


def retrieve_variable(store: VariableStore, name: str) -> VariableResult:
	logger.debug(f'retrieve_variable args: {stringify_small({"name": name})}')
	value = store.get(name)
	if value is None:
		logger.warning(f"Variable '{name}' not found")
		return VariableResult(success=False, reason='Variable not found')

	logger.info(f"📦 Variable '{name}' retrieved with value '{truncate_value(value)}'")
	return VariableResult(success=True, value=value)


def list_variables(store: VariableStore) -> VariableList:
	return VariableList(names=store.names())
