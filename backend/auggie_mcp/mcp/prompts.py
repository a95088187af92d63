from typing import Optional

from auggie_mcp.core.config import APP_NAME, APP_VERSION

HELLO_TEXT = "You are connected to Auggie MCP."

STRATEGY_TEXT = "".join(
    [
        "Plan:\n",
        "1) Detect Auggie CLI (version/help).\n",
        "2) Expose read-only project tools (list/search/read).\n",
        "3) Add guarded exec wrappers for Auggie subcommands (opt-in).\n",
        "4) Provide resources documenting capabilities.\n",
    ]
)


def commit_message(summary: str, details: Optional[str] = None, scope: Optional[str] = None) -> str:
    scope_str = f"({scope})" if scope else ""
    body = f"\n\n{details}" if details else ""
    return f"feat{scope_str}: {summary}{body}"


def pr_description(title: str, changes: str) -> str:
    return (
        f"# {title}\n\n## Summary\n{changes}\n\n"
        "## Checklist\n- [ ] Tests pass\n- [ ] Lint passes\n- [ ] Docs updated"
    )


def version_text() -> str:
    return f"{APP_NAME} {APP_VERSION}"


CAPABILITIES_MD = "\n".join(
    [
        "# Auggie MCP Capabilities",
        "",
        "Tools:",
        "- echo(text)",
        "- auggie_version",
        "- auggie_help",
        "- auggie_call(args[]) (guarded by AUGGIE_MCP_ALLOW_EXEC)",
        "- project_list_md",
        "- project_search_md(query, max_results?)",
        "- project_search_text(query, globs?, max_results?)",
        "- project_read_file(path, start?, end?)",
        "- git_status",
        "- git_diff(ref_a?, ref_b?, path?)",
        "- auggie_print(instruction, quiet?, compact?, rules_file?, mcp_config?)",
        "- auggie_continue(quiet?, compact?)",
        "- auggie_run_file(path, quiet?, compact?)",
        "- auggie_auth(action)",
        "- auggie_plan(goal, paths?, constraints?, include_contents?, input_cap_bytes?, quiet?, compact?, rules_file?, mcp_config?)",
        "- auggie_review(title?, paths?, diff?, quiet?, compact?)",
        "",
        "Prompts:",
        "- hello",
        "- strategy_of_attack",
        "- commit_message(summary, details?, scope?)",
        "- pr_description(title, changes)",
        "",
        "Resources:",
        "- app://version",
        "- app://capabilities",
        "",
        "HTTP streaming (optional):",
        "- Set AUGGIE_MCP_HTTP_PORT to enable SSE server",
        "- POST /stream with { args: string[], stdinText?: string }",
        "- Events: stdout, stderr, error, end",
        "- GET /health returns { ok: true }",
    ]
)
