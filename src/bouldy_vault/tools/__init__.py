from mcp.server.fastmcp import FastMCP

from bouldy_vault.tools.note_tools import register_note_tools
from bouldy_vault.tools.prompt_tools import register_prompt_tools
from bouldy_vault.tools.todo_tools import register_todo_tools
from bouldy_vault.tools.vault_tools import register_vault_tools

__all__ = [
    "register_all_tools",
    "register_note_tools",
    "register_prompt_tools",
    "register_todo_tools",
    "register_vault_tools",
]


def register_all_tools(mcp: FastMCP, ctx) -> None:
    register_todo_tools(mcp, ctx)
    register_note_tools(mcp, ctx)
    register_prompt_tools(mcp, ctx)
    register_vault_tools(mcp, ctx)
