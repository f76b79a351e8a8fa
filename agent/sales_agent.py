# =============================================================================
# agent/sales_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the ADK agent that answers sales questions.  The agent owns no
#   Odoo logic: it reasons with an LLM (via LiteLlm) and reaches Odoo only
#   through the MCP tools in tools/mcp_server.py.
#
#   ┌──────────────┐   stdio/MCP   ┌──────────────────┐   XML-RPC   ┌──────┐
#   │  ADK Agent   │ ────────────▶ │  FastMCP server  │ ──────────▶ │ Odoo │
#   │  (LiteLlm)   │               │  tools/ + core/  │             │      │
#   └──────────────┘               └──────────────────┘             └──────┘
#
# MODEL:
#   SALES_AGENT_MODEL selects any LiteLlm model string
#   (default "openrouter/openai/gpt-4o"; needs OPENROUTER_API_KEY).
# =============================================================================

import os
import sys

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import SALES_ANALYST_PROMPT


DEFAULT_MODEL = "openrouter/openai/gpt-4o"


def create_agent() -> Agent:
    """Create the Odoo sales analyst agent.

    The MCP server is started as a subprocess with the same interpreter as
    this process, from the project root, so `core` and `tools` import the
    same way they do here.  It inherits our environment (ODOO_* settings).
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command=sys.executable,
            args=["-m", "tools.mcp_server"],
            cwd=project_root,
            env=dict(os.environ),
        ),
    )

    return Agent(
        name="odoo_sales_analyst",
        model=LiteLlm(model=os.environ.get("SALES_AGENT_MODEL", DEFAULT_MODEL)),
        instruction=SALES_ANALYST_PROMPT,
        tools=[mcp_tools],
    )
