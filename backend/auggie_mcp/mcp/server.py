"""MCP server exposing the Auggie CLI and project helpers over stdio."""

from typing import Annotated, List, Literal, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.prompts import base
from mcp.types import ToolAnnotations
from pydantic import Field

from auggie_mcp.core.config import APP_NAME, get_settings
from auggie_mcp.mcp import prompts, tools

mcp = FastMCP(
    APP_NAME,
    instructions="""
# Auggie MCP

Bridges the Auggie CLI into MCP clients.

- Read-only project tools (list/search/read markdown and text files,
  git status/diff) are always available.
- Tools that run the CLI with caller input (auggie_call, auggie_print,
  auggie_plan, auggie_review, ...) require AUGGIE_MCP_ALLOW_EXEC=true.
- Read app://capabilities for the full list.
""",
)


@mcp.tool()
async def echo(text: str) -> str:
    """Echo the given text back."""
    return await tools.echo(text)


@mcp.tool()
async def auggie_version() -> str:
    """Report the installed Auggie CLI version."""
    return await tools.auggie_version(get_settings())


@mcp.tool()
async def auggie_help() -> str:
    """Show Auggie CLI help, or a docs link when the CLI is missing."""
    return await tools.auggie_help(get_settings())


@mcp.tool(annotations=ToolAnnotations(destructiveHint=False, idempotentHint=True))
async def auggie_call(
    args: Annotated[List[str], Field(description="Arguments after the `auggie` command")],
) -> str:
    """Run `auggie` with arbitrary arguments (requires AUGGIE_MCP_ALLOW_EXEC=true)."""
    return await tools.auggie_call(get_settings(), args)


@mcp.tool()
async def project_list_md() -> str:
    """List markdown files in the project."""
    return await tools.project_list_md(get_settings())


@mcp.tool()
async def project_search_md(
    query: str,
    max_results: Annotated[Optional[int], Field(gt=0, le=500)] = None,
) -> str:
    """Case-insensitive search across markdown files."""
    return await tools.project_search_md(get_settings(), query, max_results)


@mcp.tool()
async def project_search_text(
    query: str,
    globs: Optional[List[str]] = None,
    max_results: Annotated[Optional[int], Field(gt=0, le=1000)] = None,
) -> str:
    """Case-insensitive search across source and text files.

    Args:
        query: Text to look for
        globs: Optional path filters (substring or shell-style pattern)
        max_results: Max hits (default 200)
    """
    return await tools.project_search_text(get_settings(), query, globs, max_results)


@mcp.tool()
async def project_read_file(
    path: str,
    start: Annotated[Optional[int], Field(gt=0)] = None,
    end: Annotated[Optional[int], Field(gt=0)] = None,
) -> str:
    """Read a project file, optionally limited to 1-based lines start..end."""
    return await tools.project_read_file(get_settings(), path, start, end)


@mcp.tool()
async def git_status() -> str:
    """Porcelain git status with branch info."""
    return await tools.git_status(get_settings())


@mcp.tool()
async def git_diff(
    ref_a: Optional[str] = None,
    ref_b: Optional[str] = None,
    path: Optional[str] = None,
) -> str:
    """Git diff, optionally between refs and limited to a path."""
    return await tools.git_diff(get_settings(), ref_a, ref_b, path)


@mcp.tool()
async def auggie_print(
    instruction: str,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
    rules_file: Optional[str] = None,
    mcp_config: Optional[str] = None,
) -> str:
    """Run a one-shot instruction with `auggie --print`."""
    return await tools.auggie_print(
        get_settings(), instruction, quiet, compact, rules_file, mcp_config
    )


@mcp.tool()
async def auggie_continue(
    quiet: Optional[bool] = None, compact: Optional[bool] = None
) -> str:
    """Resume the previous Auggie session."""
    return await tools.auggie_continue(get_settings(), quiet, compact)


@mcp.tool()
async def auggie_run_file(
    path: str, quiet: Optional[bool] = None, compact: Optional[bool] = None
) -> str:
    """Execute the instruction stored in a project file."""
    return await tools.auggie_run_file(get_settings(), path, quiet, compact)


@mcp.tool()
async def auggie_auth(action: Literal["login", "logout", "print-token"]) -> str:
    """Log in, log out, or print the Augment token."""
    return await tools.auggie_auth(get_settings(), action)


@mcp.tool()
async def auggie_plan(
    goal: str,
    paths: Optional[List[str]] = None,
    constraints: Optional[str] = None,
    include_contents: Optional[bool] = None,
    input_cap_bytes: Annotated[Optional[int], Field(gt=0, le=1_000_000)] = None,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
    rules_file: Optional[str] = None,
    mcp_config: Optional[str] = None,
) -> str:
    """
    Ask Auggie for a step-by-step plan toward a goal.

    With include_contents, the listed files are piped on stdin (capped at
    input_cap_bytes, default 200KB).
    """
    return await tools.auggie_plan(
        get_settings(),
        goal,
        paths=paths,
        constraints=constraints,
        include_contents=include_contents,
        input_cap_bytes=input_cap_bytes,
        quiet=quiet,
        compact=compact,
        rules_file=rules_file,
        mcp_config=mcp_config,
    )


@mcp.tool()
async def auggie_review(
    title: Optional[str] = None,
    paths: Optional[List[str]] = None,
    diff: Optional[str] = None,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
) -> str:
    """
    Ask Auggie for a code review.

    A unified diff is reviewed as-is; otherwise file contents plus their
    git diff are sent on stdin.
    """
    return await tools.auggie_review(
        get_settings(), title=title, paths=paths, diff=diff, quiet=quiet, compact=compact
    )


@mcp.prompt(description="Returns a friendly greeting")
def hello() -> List[base.Message]:
    return [base.AssistantMessage(prompts.HELLO_TEXT)]


@mcp.prompt(
    description="Drafts a high-level plan to integrate Auggie CLI capabilities via MCP"
)
def strategy_of_attack() -> List[base.Message]:
    return [base.AssistantMessage(prompts.STRATEGY_TEXT)]


@mcp.prompt(description="Generates a conventional commit message from summary + context")
def commit_message(
    summary: str, details: Optional[str] = None, scope: Optional[str] = None
) -> List[base.Message]:
    return [base.AssistantMessage(prompts.commit_message(summary, details, scope))]


@mcp.prompt(description="Drafts a PR description from title + changes")
def pr_description(title: str, changes: str) -> List[base.Message]:
    return [base.AssistantMessage(prompts.pr_description(title, changes))]


@mcp.resource("app://version", name="version", mime_type="text/plain")
def version() -> str:
    return prompts.version_text()


@mcp.resource("app://capabilities", name="capabilities", mime_type="text/markdown")
def capabilities() -> str:
    return prompts.CAPABILITIES_MD
