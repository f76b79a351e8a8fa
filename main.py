# =============================================================================
# main.py  —  Entry Point for the Odoo Sales Analyst Agent
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env (ODOO_* settings and the LLM API key)
#   2. Checks the Odoo connection (URL, endpoint, XML-RPC handshake)
#   3. Creates the ADK agent (agent/sales_agent.py), which spawns the
#      FastMCP server (tools/mcp_server.py) over stdio
#   4. Reads questions from the console and streams the agent's answers
#
# To use the tools from another MCP client instead (Claude Desktop, an IDE),
# run only the server:  python -m tools.mcp_server
# =============================================================================

import asyncio
import sys

from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm reads its API key and the
# MCP subprocess inherits ODOO_* from this environment.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.sales_agent import create_agent
from core.config import ConfigError, load_config
from core.connection import check_connection
from core.odoo_client import OdooClient


APP_NAME = "odoo_sales_analyst"
USER_ID = "console_user"


async def show_odoo_status(client: OdooClient) -> bool:
    """Print a short summary of the check_odoo_connection report.

    Returns True when the XML-RPC handshake worked.
    """
    report = await check_connection(client)
    print(f"\n🔌 Odoo: {report['url']} (database {report['database']})")

    if report["xmlrpc"]["ok"]:
        version = report["xmlrpc"]["version"]
        server_version = version.get("server_version", "?") if isinstance(version, dict) else version
        print(f"✅ XML-RPC handshake OK, server version {server_version}")
        return True

    print(f"⚠️  XML-RPC handshake failed:\n{report['xmlrpc']['error']}")
    if report.get("suggested_urls"):
        print("   Try one of:")
        for url in report["suggested_urls"]:
            print(f"     {url}")
    return False


async def preflight() -> bool:
    """Check the Odoo settings before spending an LLM call on them.

    Only missing or invalid settings return False.  A failed handshake is
    reported but not fatal: the agent can still explain the problem
    through check_odoo_connection.
    """
    try:
        config = load_config()
    except ConfigError as exc:
        print(f"\n❌ {exc}")
        return False

    client = OdooClient(config)
    try:
        await show_odoo_status(client)
    finally:
        await client.aclose()
    return True


async def run_agent() -> int:
    """Run the sales analyst interactively until the user quits."""
    print("=" * 70)
    print("  ODOO SALES ANALYST")
    print("  Google ADK + LiteLlm + FastMCP")
    print("=" * 70)
    if not await preflight():
        return 1
    print("\n🔧 Initializing agent...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(agent=agent, app_name=APP_NAME, session_service=session_service)
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    print("💬 Ask about your sales orders (type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(role="user", parts=[types.Part(text=user_input)])

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text
                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run_agent()))
