# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP tool wrappers.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  Each tool:
#     1. Logs the call
#     2. Awaits a core/ coroutine
#     3. Returns the JSON-ready dict it produced
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT talk XML-RPC (that's core/odoo_client.py)
#   - They do NOT shape or aggregate records (that's core/sales.py)
#   - They do NOT know about Google ADK
# =============================================================================
