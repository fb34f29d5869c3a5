"""
Accessibility snapshot tooling for browser workflows.

- snapshot: parse Playwright ARIA snapshots and filter them by role/text/attributes
- variables: named values shared between workflow tools
- browser: capture snapshots from live pages
- mcp: expose the tools over MCP
"""

__version__ = '0.1.0'
