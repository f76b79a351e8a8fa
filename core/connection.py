# =============================================================================
# core/connection.py  —  Connection Health Check
# =============================================================================
#
# Backs the check_odoo_connection tool.  Runs the three independent checks
# a user would otherwise do by hand when the sales tools keep failing:
#   1. Does the configured URL look like an Odoo base URL?
#   2. What does the common endpoint answer to a raw HTTP POST?
#   3. Does version() over XML-RPC work (with full diagnosis if not)?
# =============================================================================

from core.endpoints import COMMON_PATH, validate_and_suggest_urls


async def check_connection(client) -> dict:
    """Summarize URL validity, endpoint probe and XML-RPC handshake."""
    url_check = validate_and_suggest_urls(client.config.url)
    probe = await client.probe.probe(COMMON_PATH)
    handshake = await client.test_connection()

    report = {
        "url": client.config.url,
        "database": client.config.database,
        "url_valid": url_check.is_valid,
        "endpoint_probe": (
            {"status": probe.data["status"], "content_type": probe.data["content_type"]}
            if probe.success
            else {"error": probe.error}
        ),
        "xmlrpc": {"ok": handshake.success},
    }
    if handshake.success:
        report["xmlrpc"]["version"] = handshake.data
    else:
        report["xmlrpc"]["error"] = handshake.error
        report["suggested_urls"] = url_check.suggestions
    return report
