"""
Unit tests for project search/read helpers and instruction composition.
"""

import pytest

from auggie_mcp.core.errors import PathEscapesRepository
from auggie_mcp.services import project
from auggie_mcp.services.compose import (
    compose_plan_instruction,
    compose_review_instruction,
)


@pytest.mark.unit
class TestProjectFiles:
    def test_markdown_listing_skips_vendor_dirs(self, repo):
        assert project.find_markdown_files(str(repo)) == ["README.md", "docs/guide.md"]

    def test_search_md_is_case_insensitive(self, repo):
        hits = project.search_in_md_files(str(repo), "auggie")

        assert {"path": "README.md", "line": 1, "preview": "# Auggie MCP"} in hits
        assert {"path": "docs/guide.md", "line": 2, "preview": "Auggie usage here"} in hits
        assert all(not h["path"].startswith("node_modules") for h in hits)

    def test_search_respects_max_results(self, repo):
        assert len(project.search_in_md_files(str(repo), "auggie", max_results=1)) == 1

    def test_search_text_filters_by_glob(self, repo):
        hits = project.search_in_text(str(repo), "auggie", globs=["*.py"])

        assert [h["path"] for h in hits] == ["main.py"]

    def test_search_text_substring_filter(self, repo):
        hits = project.search_in_text(str(repo), "auggie", globs=["docs/"])

        assert [h["path"] for h in hits] == ["docs/guide.md"]

    def test_preview_is_truncated(self, repo):
        (repo / "long.md").write_text("needle " + "x" * 500 + "\n")

        hits = project.search_in_md_files(str(repo), "needle")

        assert len(hits[0]["preview"]) == project.PREVIEW_CHARS

    def test_format_hits(self):
        text = project.format_hits([{"path": "a.md", "line": 3, "preview": "hello"}])

        assert text == "a.md:3: hello"


@pytest.mark.unit
class TestSafeReadFile:
    def test_whole_file(self, repo):
        assert project.safe_read_file(str(repo), "docs/guide.md") == "intro\nAuggie usage here\nend\n"

    def test_line_range_is_one_based_inclusive(self, repo):
        assert project.safe_read_file(str(repo), "docs/guide.md", 2, 3) == "Auggie usage here\nend"
        assert project.safe_read_file(str(repo), "README.md", 1, 2) == "# Auggie MCP\n"

    def test_traversal_is_rejected(self, repo):
        with pytest.raises(PathEscapesRepository):
            project.safe_read_file(str(repo), "../README.md")
        with pytest.raises(PathEscapesRepository):
            project.safe_read_file(str(repo), "/etc/passwd")

    def test_sibling_prefix_is_not_inside(self, repo):
        sibling = repo.parent / (repo.name + "-other")
        sibling.mkdir()
        (sibling / "x.md").write_text("secret")

        with pytest.raises(PathEscapesRepository):
            project.resolve_in_repo(str(repo), f"../{sibling.name}/x.md")

    def test_collect_sections_caps_size(self, repo):
        sections = project.collect_file_sections(
            str(repo), ["README.md", "docs/guide.md", "../escape.md"], cap_bytes=10
        )

        assert sections == ["===== README.md =====\n# Auggie M"]


@pytest.mark.unit
class TestCompose:
    def test_plan_instruction(self):
        plan = compose_plan_instruction(
            "Improve DX", "No breaking changes", ["src/server.py", "README.md"]
        )

        assert "Goal:\nImprove DX" in plan
        assert "Constraints:\nNo breaking changes" in plan
        assert "Paths in focus:\n- src/server.py\n- README.md" in plan

    def test_plan_without_constraints(self):
        plan = compose_plan_instruction("Ship it")

        assert "Constraints:\n(none specified)" in plan
        assert "Paths in focus" not in plan

    def test_review_instruction_with_title_and_paths(self):
        review = compose_review_instruction("PR Review", ["src/server.py"], False)

        assert review.startswith("Title: PR Review\n\n")
        assert "Files referenced:\n- src/server.py" in review
        assert "separate file context" in review

    def test_review_instruction_with_diff(self):
        review = compose_review_instruction(None, None, True)

        assert "unified diff" in review
        assert "Title:" not in review
