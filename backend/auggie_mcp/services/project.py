"""Read-only helpers over the trusted project root."""

import fnmatch
import os
import re
from typing import Iterable, List, Optional, Sequence, TypedDict

from auggie_mcp.core.errors import PathEscapesRepository

MARKDOWN_EXTENSIONS = (".md",)
TEXT_EXTENSIONS = (
    ".md",
    ".py",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".json",
    ".yaml",
    ".yml",
    ".toml",
)
SKIP_DIRS = {"node_modules", "__pycache__", ".venv"}
PREVIEW_CHARS = 240

_LINE_SPLIT = re.compile(r"\r?\n")


class SearchHit(TypedDict):
    path: str
    line: int
    preview: str


def resolve_in_repo(root: str, rel_path: str) -> str:
    root = os.path.realpath(root)
    abs_path = os.path.realpath(os.path.join(root, rel_path))
    if os.path.commonpath([root, abs_path]) != root:
        raise PathEscapesRepository(rel_path)
    return abs_path


def safe_read_file(
    root: str, rel_path: str, start: Optional[int] = None, end: Optional[int] = None
) -> str:
    """Read a file under ``root``, optionally limited to 1-based lines start..end."""
    abs_path = resolve_in_repo(root, rel_path)
    with open(abs_path, "r", encoding="utf-8", errors="replace") as handle:
        content = handle.read()
    if start is None and end is None:
        return content
    lines = _LINE_SPLIT.split(content)
    first = max(1, start if start is not None else 1) - 1
    last = min(len(lines), end if end is not None else len(lines))
    return "\n".join(lines[first:last])


def _skip_dir(name: str) -> bool:
    return name in SKIP_DIRS or name.startswith(".git")


def find_files_by_ext(root: str, exts: Sequence[str]) -> List[str]:
    results: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not _skip_dir(d)]
        for name in filenames:
            if name.lower().endswith(tuple(exts)):
                rel = os.path.relpath(os.path.join(dirpath, name), root)
                results.append(rel.replace(os.sep, "/"))
    return sorted(results)


def find_markdown_files(root: str) -> List[str]:
    return find_files_by_ext(root, MARKDOWN_EXTENSIONS)


def _search_files(
    root: str, files: Iterable[str], query: str, max_results: int
) -> List[SearchHit]:
    needle = query.lower()
    hits: List[SearchHit] = []
    for rel in files:
        try:
            with open(os.path.join(root, rel), "r", encoding="utf-8", errors="replace") as handle:
                content = handle.read()
        except OSError:
            continue
        for index, line in enumerate(_LINE_SPLIT.split(content)):
            if needle in line.lower():
                hits.append(
                    {"path": rel, "line": index + 1, "preview": line[:PREVIEW_CHARS]}
                )
                if len(hits) >= max_results:
                    return hits
    return hits


def search_in_md_files(root: str, query: str, max_results: int = 50) -> List[SearchHit]:
    return _search_files(root, find_markdown_files(root), query, max_results)


def _matches_glob(path: str, globs: Sequence[str]) -> bool:
    return any(g in path or fnmatch.fnmatch(path, g) for g in globs)


def search_in_text(
    root: str,
    query: str,
    globs: Optional[Sequence[str]] = None,
    max_results: int = 200,
) -> List[SearchHit]:
    files = find_files_by_ext(root, TEXT_EXTENSIONS)
    if globs:
        files = [f for f in files if _matches_glob(f, globs)]
    return _search_files(root, files, query, max_results)


def format_hits(hits: Sequence[SearchHit]) -> str:
    return "\n".join(f"{h['path']}:{h['line']}: {h['preview']}" for h in hits)


def collect_file_sections(
    root: str, rel_paths: Sequence[str], cap_bytes: Optional[int] = None
) -> List[str]:
    """``===== path =====`` sections for each readable file, capped in total size.

    Paths outside ``root`` or unreadable files are skipped.
    """
    sections: List[str] = []
    used = 0
    for rel in rel_paths:
        try:
            abs_path = resolve_in_repo(root, rel)
            with open(abs_path, "r", encoding="utf-8", errors="replace") as handle:
                content = handle.read()
        except (PathEscapesRepository, OSError):
            continue
        if cap_bytes is not None:
            if used + len(content) > cap_bytes:
                content = content[: max(0, cap_bytes - used)]
            used += len(content)
        sections.append(f"===== {rel} =====\n{content}")
        if cap_bytes is not None and used >= cap_bytes:
            break
    return sections
