from typing import List, Optional, Sequence


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def compose_plan_instruction(
    goal: str,
    constraints: Optional[str] = None,
    paths: Optional[Sequence[str]] = None,
) -> str:
    path_list = f"\n\nPaths in focus:\n{_bullets(paths)}" if paths else ""
    parts = [
        "You are an AI agent. Create a clear, step-by-step plan to achieve the goal in this repository.",
        "Provide: high-level phases, concrete actions, and any risks or prerequisites.",
        f"Constraints:\n{constraints}" if constraints else "Constraints:\n(none specified)",
        f"Goal:\n{goal}",
        "If stdin provides repository context, use it judiciously. Do not hallucinate paths.",
        path_list,
    ]
    return "\n\n".join(parts)


def compose_review_instruction(
    title: Optional[str] = None,
    paths: Optional[Sequence[str]] = None,
    has_diff: bool = False,
) -> str:
    heading = f"Title: {title}\n\n" if title else ""
    parts: List[str] = [
        "Perform a thorough code review. Identify correctness issues, design concerns, edge cases, and missing tests.",
        "Propose minimal, specific improvements. Use bullet points and cite paths/lines from the provided context.",
    ]
    if paths:
        parts.append(f"Files referenced:\n{_bullets(paths)}")
    if has_diff:
        parts.append("Context comes from stdin as a unified diff.")
    else:
        parts.append(
            "If stdin provides file content, treat each section as a separate file context."
        )
    return heading + "\n\n".join(parts)
