# =============================================================================
# core/__init__.py
# =============================================================================
# All Odoo logic: configuration, the XML-RPC session, response diagnosis,
# and the sales queries behind the tools.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or Google ADK.  The network
#   stack is httpx plus the standard library's xmlrpc marshalling, so every
#   module can be exercised with httpx.MockTransport and no Odoo server.
# =============================================================================
