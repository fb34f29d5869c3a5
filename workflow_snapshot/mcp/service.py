import logging
from typing import Literal, Optional

from fastmcp import FastMCP

from workflow_snapshot.snapshot.service import SnapshotFilterService
from workflow_snapshot.snapshot.views import SnapshotFilter, SnapshotFilterInput
from workflow_snapshot.variables.service import VariableStore, list_variables, retrieve_variable, store_variable
from workflow_snapshot.variables.views import StoreVariableParams

logger = logging.getLogger(__name__)

SNAPSHOT_GET_AND_FILTER_DESCRIPTION = (
	'Parse an accessibility YAML snapshot from a variable and return a filtered subtree by role/text/attributes. '
	'Only works when snapshots are saved with the browser_snapshot_and_save tool.'
)
SNAPSHOT_FILTER_JSON_DESCRIPTION = (
	'Re-filter a JSON result previously stored by snapshot_get_and_filter (via storeInVariable). '
	'Use to narrow large results step by step without taking a new snapshot.'
)


def get_mcp_server(
	store: VariableStore | None = None,
	max_chars: int | None = None,
	name: str = 'SnapshotFilterService',
	instructions: str = 'Filters accessibility snapshots saved in workflow variables.',
) -> FastMCP:
	store = store if store is not None else VariableStore()
	mcp_app = FastMCP(name=name, instructions=instructions)

	_setup_snapshot_tools(mcp_app, SnapshotFilterService(store, max_chars=max_chars))
	_setup_variable_tools(mcp_app, store)
	return mcp_app


def _setup_snapshot_tools(mcp_app: FastMCP, filter_service: SnapshotFilterService) -> None:
	"""Register the raw-snapshot and JSON re-filter tools, both backed by one service."""

	def create_runner(source_kind: Literal['raw', 'json']):
		def run_filter(
			variable: str,
			filter: Optional[SnapshotFilter] = None,
			includeSubtree: bool = False,
			mode: Literal['first', 'all'] = 'all',
			maxResults: Optional[int] = None,
			storeInVariable: Optional[str] = None,
		) -> dict:
			params = SnapshotFilterInput(
				variable=variable,
				sourceKind=source_kind,
				filter=filter or SnapshotFilter(),
				includeSubtree=includeSubtree,
				mode=mode,
				maxResults=maxResults,
				storeResultAs=storeInVariable,
			)
			return filter_service.run(params).to_output()

		return run_filter

	mcp_app.tool(name='snapshot_get_and_filter', description=SNAPSHOT_GET_AND_FILTER_DESCRIPTION)(create_runner('raw'))
	mcp_app.tool(name='snapshot_filter_json', description=SNAPSHOT_FILTER_JSON_DESCRIPTION)(create_runner('json'))
	logger.debug("Registered tools 'snapshot_get_and_filter', 'snapshot_filter_json'")


def _setup_variable_tools(mcp_app: FastMCP, store: VariableStore) -> None:
	@mcp_app.tool(name='store_variable', description='Store a variable for future use in a workflow')
	def store_variable_tool(name: str, value: str, overwrite: bool = False) -> dict:
		params = StoreVariableParams(name=name, value=value, overwrite=overwrite)
		return store_variable(store, params).model_dump(exclude_none=True)

	@mcp_app.tool(name='retrieve_variable', description='Retrieve a variable from the workflow')
	def retrieve_variable_tool(name: str) -> dict:
		return retrieve_variable(store, name).model_dump(exclude_none=True)

	@mcp_app.tool(name='list_variables', description='List names of stored workflow variables')
	def list_variables_tool() -> dict:
		return list_variables(store).model_dump()

	logger.debug("Registered tools 'store_variable', 'retrieve_variable', 'list_variables'")
