import asyncio
import json

from fastmcp import Client, FastMCP

from workflow_snapshot.mcp.service import get_mcp_server
from workflow_snapshot.variables.service import VariableStore


def test_server_registers_snapshot_and_variable_tools():
	mcp_app = get_mcp_server(VariableStore())

	tools = asyncio.run(mcp_app.get_tools())

	assert isinstance(mcp_app, FastMCP)
	assert {
		'snapshot_get_and_filter',
		'snapshot_filter_json',
		'store_variable',
		'retrieve_variable',
		'list_variables',
	} <= set(tools)


def _call(mcp_app: FastMCP, name: str, arguments: dict) -> dict:
	async def call():
		async with Client(mcp_app) as client:
			result = await client.call_tool(name, arguments)
		content = getattr(result, 'content', result)
		return json.loads(content[0].text)

	return asyncio.run(call())


def test_tools_share_one_store():
	store = VariableStore()
	mcp_app = get_mcp_server(store)

	stored = _call(mcp_app, 'store_variable', {'name': 'rows', 'value': 'table:\n  - row "Item A"\n  - row "Misc"'})
	filtered = _call(
		mcp_app,
		'snapshot_get_and_filter',
		{'variable': 'rows', 'filter': {'role': 'row', 'text': {'contains': 'item'}}, 'storeInVariable': 'items'},
	)
	refiltered = _call(mcp_app, 'snapshot_filter_json', {'variable': 'items', 'mode': 'first'})
	listed = _call(mcp_app, 'list_variables', {})

	assert stored == {'success': True}
	assert filtered['success'] is True
	assert filtered['count'] == 1
	assert refiltered['count'] == 1
	assert listed == {'names': ['rows', 'items']}
	assert json.loads(store.get('items'))[0]['text'] == 'Item A'


def test_filter_tool_reports_missing_variable():
	mcp_app = get_mcp_server(VariableStore())

	result = _call(mcp_app, 'snapshot_get_and_filter', {'variable': 'nothing'})

	assert result == {'success': False, 'count': 0, 'reason': "Variable 'nothing' not found"}
