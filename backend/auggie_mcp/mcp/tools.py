"""MCP tool implementations.

Each function returns the text the tool reports back to the client. The
``settings`` snapshot supplies the project root and the execution gate.
"""

import asyncio
from typing import Dict, List, Optional

from auggie_mcp.core.config import DOCS_URL, Settings
from auggie_mcp.core.errors import ExecFailed
from auggie_mcp.core.gate import ExecutionGate
from auggie_mcp.services import project
from auggie_mcp.services.compose import (
    compose_plan_instruction,
    compose_review_instruction,
)
from auggie_mcp.services.exec import run_auggie, run_cli, run_exec_file

DEFAULT_INPUT_CAP_BYTES = 200_000

AUTH_ACTIONS: Dict[str, List[str]] = {
    "login": ["--login"],
    "logout": ["--logout"],
    "print-token": ["--print-augment-token"],
}


def _failure_text(exc: ExecFailed) -> str:
    return exc.stderr or str(exc)


def _output_flags(quiet: Optional[bool], compact: Optional[bool]) -> List[str]:
    flags: List[str] = []
    if quiet:
        flags.append("--quiet")
    if compact:
        flags.append("--compact")
    return flags


def sanitize_maybe_path(settings: Settings, value: Optional[str]) -> Optional[str]:
    """Pin path-looking values (``./x``, ``/x``) inside the project root.

    Anything else, such as a URL or inline JSON, passes through untouched.
    """
    if not value:
        return value
    if value.startswith(".") or value.startswith("/"):
        return project.resolve_in_repo(settings.repo_root, value)
    return value


def _config_flags(
    settings: Settings, rules_file: Optional[str], mcp_config: Optional[str]
) -> List[str]:
    flags: List[str] = []
    rules = sanitize_maybe_path(settings, rules_file)
    mcp_cfg = sanitize_maybe_path(settings, mcp_config)
    if rules:
        flags.extend(["--rules", rules])
    if mcp_cfg:
        flags.extend(["--mcp-config", mcp_cfg])
    return flags


async def echo(text: str) -> str:
    return text


async def auggie_version(settings: Settings) -> str:
    try:
        result = await run_cli(settings, ["--version"])
    except ExecFailed:
        return "Auggie CLI not found or failed to execute. Ensure it is installed and on PATH."
    return result.stdout.strip()


async def auggie_help(settings: Settings) -> str:
    try:
        result = await run_cli(settings, ["--help"])
    except ExecFailed:
        return f"Auggie CLI not available. See docs: {DOCS_URL}"
    return result.stdout


async def auggie_call(settings: Settings, args: List[str]) -> str:
    gate = ExecutionGate.from_settings(settings)
    if not gate.is_allowed():
        return gate.disabled_message("auggie_call")
    try:
        result = await run_cli(settings, args)
    except ExecFailed as exc:
        return f"Execution failed: {_failure_text(exc)}"
    text = "\n".join(part for part in (result.stdout, result.stderr) if part).strip()
    return text or "(no output)"


async def project_list_md(settings: Settings) -> str:
    files = await asyncio.to_thread(project.find_markdown_files, settings.repo_root)
    return "\n".join(files) or "(none)"


async def project_search_md(
    settings: Settings, query: str, max_results: Optional[int] = None
) -> str:
    hits = await asyncio.to_thread(
        project.search_in_md_files, settings.repo_root, query, max_results or 50
    )
    return project.format_hits(hits) or "(no matches)"


async def project_search_text(
    settings: Settings,
    query: str,
    globs: Optional[List[str]] = None,
    max_results: Optional[int] = None,
) -> str:
    hits = await asyncio.to_thread(
        project.search_in_text, settings.repo_root, query, globs, max_results or 200
    )
    return project.format_hits(hits) or "(no matches)"


async def project_read_file(
    settings: Settings, path: str, start: Optional[int] = None, end: Optional[int] = None
) -> str:
    return await asyncio.to_thread(
        project.safe_read_file, settings.repo_root, path, start, end
    )


async def git_status(settings: Settings) -> str:
    try:
        result = await run_exec_file(
            "git", ["status", "--porcelain=v1", "--branch"], settings.repo_root
        )
    except ExecFailed as exc:
        return f"git_status failed: {_failure_text(exc)}"
    return result.stdout


async def git_diff(
    settings: Settings,
    ref_a: Optional[str] = None,
    ref_b: Optional[str] = None,
    path: Optional[str] = None,
) -> str:
    args = ["diff"]
    if ref_a or ref_b:
        args.append(f"{ref_a or ''}{f'...{ref_b}' if ref_b else ''}")
    if path:
        args.extend(["--", path])
    try:
        result = await run_exec_file("git", args, settings.repo_root)
    except ExecFailed as exc:
        return f"git_diff failed: {_failure_text(exc)}"
    return result.stdout or "(no diff)"


async def auggie_print(
    settings: Settings,
    instruction: str,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
    rules_file: Optional[str] = None,
    mcp_config: Optional[str] = None,
) -> str:
    args = ["--print", instruction]
    args.extend(_output_flags(quiet, compact))
    args.extend(_config_flags(settings, rules_file, mcp_config))
    return await run_auggie(settings, args)


async def auggie_continue(
    settings: Settings, quiet: Optional[bool] = None, compact: Optional[bool] = None
) -> str:
    args = ["--continue", *_output_flags(quiet, compact)]
    return await run_auggie(settings, args)


async def auggie_run_file(
    settings: Settings,
    path: str,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
) -> str:
    abs_path = project.resolve_in_repo(settings.repo_root, path)
    args = ["--instruction-file", abs_path, *_output_flags(quiet, compact)]
    return await run_auggie(settings, args)


async def auggie_auth(settings: Settings, action: str) -> str:
    if action not in AUTH_ACTIONS:
        raise ValueError(f"unknown auth action: {action}")
    return await run_auggie(settings, AUTH_ACTIONS[action])


async def auggie_plan(
    settings: Settings,
    goal: str,
    paths: Optional[List[str]] = None,
    constraints: Optional[str] = None,
    include_contents: Optional[bool] = None,
    input_cap_bytes: Optional[int] = None,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
    rules_file: Optional[str] = None,
    mcp_config: Optional[str] = None,
) -> str:
    args = ["--print", *_output_flags(quiet, compact)]
    args.extend(_config_flags(settings, rules_file, mcp_config))
    instruction = compose_plan_instruction(goal, constraints, paths)

    stdin_text: Optional[str] = None
    if include_contents and paths:
        sections = await asyncio.to_thread(
            project.collect_file_sections,
            settings.repo_root,
            paths,
            input_cap_bytes or DEFAULT_INPUT_CAP_BYTES,
        )
        if sections:
            stdin_text = "\n\n".join(sections)

    return await run_auggie(settings, [*args, instruction], stdin_text)


async def auggie_review(
    settings: Settings,
    title: Optional[str] = None,
    paths: Optional[List[str]] = None,
    diff: Optional[str] = None,
    quiet: Optional[bool] = None,
    compact: Optional[bool] = None,
) -> str:
    args = ["--print", *_output_flags(quiet, compact)]
    instruction = compose_review_instruction(title, paths, bool(diff))

    stdin_text: Optional[str] = None
    if diff:
        stdin_text = diff
    elif paths:
        sections = await asyncio.to_thread(
            project.collect_file_sections, settings.repo_root, paths
        )
        try:
            result = await run_exec_file("git", ["diff", "--", *paths], settings.repo_root)
            if result.stdout.strip():
                sections.append(
                    f"===== git diff ({', '.join(paths)}) =====\n{result.stdout}"
                )
        except ExecFailed:
            # not a git checkout, or git is missing
            pass
        if sections:
            stdin_text = "\n\n".join(sections)

    return await run_auggie(settings, [*args, instruction], stdin_text)
