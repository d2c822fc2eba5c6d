"""
Unit tests for the pull request comment: rendering and upsert.
"""

import asyncio

from cypress_pr_videos.core.videos.comments import (
    COMMENT_MARKER,
    CommentUpserter,
    build_comment_body,
    display_name,
)
from cypress_pr_videos.core.videos.models import (
    Comment,
    CommentAction,
    DisplayMode,
    PullRequestRef,
    UploadResult,
)

from fakes import FakeCommentHost


PR = PullRequestRef(owner="test-org", repo="test-repo", number=42)

RESULTS = [
    UploadResult(spec="cypress/e2e/auth/login.cy.ts", url="https://example.com/video1"),
    UploadResult(spec="cypress/e2e/cart/checkout.cy.ts", url="https://example.com/video2"),
]


# ---------------------------------------------------------------------------
# Rendering Tests
# ---------------------------------------------------------------------------

class TestDisplayName:
    """Tests for the short spec name shown in comments."""

    def test_keeps_last_two_segments(self):
        assert display_name("cypress/e2e/auth/login.cy.ts") == "auth/login.cy.ts"

    def test_non_standard_root(self):
        assert display_name("tests/e2e/login.cy.ts") == "e2e/login.cy.ts"

    def test_single_segment(self):
        assert display_name("login.cy.ts") == "login.cy.ts"


class TestBuildCommentBody:
    """Tests for the comment body."""

    def test_inline_mode_is_default(self):
        body = build_comment_body("### Cypress Test Videos", RESULTS, 259200)

        assert body.startswith(COMMENT_MARKER)
        assert "### Cypress Test Videos" in body
        assert body.count("<details open>") == 2
        assert "<strong>auth/login.cy.ts</strong>" in body
        assert "<strong>cart/checkout.cy.ts</strong>" in body
        assert "https://example.com/video1" in body
        assert "https://example.com/video2" in body
        assert body.endswith("> Videos expire 72 hours after upload.")

    def test_table_mode(self):
        body = build_comment_body("### Videos", RESULTS, 259200, DisplayMode.TABLE)

        assert body.startswith(COMMENT_MARKER)
        assert "| Spec | Video |" in body
        assert "| `auth/login.cy.ts` | [▶️ Watch](https://example.com/video1) |" in body
        assert "`cart/checkout.cy.ts`" in body
        assert "<details" not in body
        assert "Videos expire 72 hours after upload." in body

    def test_one_hour_is_not_pluralised(self):
        body = build_comment_body("### Videos", RESULTS[:1], 3600)

        assert "Videos expire 1 hours after upload." in body

    def test_rounds_half_hours_up(self):
        body = build_comment_body("### Videos", RESULTS[:1], 5400)

        assert "Videos expire 2 hours after upload." in body

    def test_results_keep_their_order(self):
        body = build_comment_body("### Videos", RESULTS, 3600)

        assert body.index("video1") < body.index("video2")

    def test_is_deterministic(self):
        first = build_comment_body("### Videos", RESULTS, 3600, DisplayMode.TABLE)
        second = build_comment_body("### Videos", RESULTS, 3600, DisplayMode.TABLE)

        assert first == second


# ---------------------------------------------------------------------------
# Upsert Tests
# ---------------------------------------------------------------------------

class TestCommentUpserter:
    """Tests for finding and creating or updating the marked comment."""

    def test_no_results_makes_no_calls(self):
        host = FakeCommentHost()

        action = asyncio.run(CommentUpserter(host).upsert(PR, [], "### Videos", 3600))

        assert action is None
        assert host.calls == []

    def test_creates_comment_when_none_is_marked(self):
        host = FakeCommentHost([Comment(id=1, body="LGTM")])

        action = asyncio.run(CommentUpserter(host).upsert(PR, RESULTS, "### Videos", 3600))

        assert action is CommentAction.CREATED
        assert len(host.calls_named("create")) == 1
        assert host.calls_named("update") == []
        assert host.calls_named("create")[0][1].startswith(COMMENT_MARKER)

    def test_updates_marked_comment_among_unrelated_ones(self):
        comments = [Comment(id=i, body=f"comment {i}") for i in range(1, 10)]
        comments.insert(4, Comment(id=77, body=f"{COMMENT_MARKER}\nold videos"))
        host = FakeCommentHost(comments)

        action = asyncio.run(CommentUpserter(host).upsert(PR, RESULTS, "### Videos", 3600))

        assert action is CommentAction.UPDATED
        assert host.calls_named("create") == []
        updates = host.calls_named("update")
        assert len(updates) == 1
        assert updates[0][1] == 77
        assert "https://example.com/video1" in updates[0][2]

    def test_pages_through_history(self):
        comments = [Comment(id=i, body="noise") for i in range(1, 251)]
        comments.append(Comment(id=999, body=f"{COMMENT_MARKER}\nold"))
        host = FakeCommentHost(comments)

        found = asyncio.run(CommentUpserter(host).find_marked_comment(PR))

        assert found is not None
        assert found.id == 999
        assert [call[1] for call in host.calls_named("list")] == [1, 2, 3]

    def test_stops_at_short_page(self):
        host = FakeCommentHost([Comment(id=1, body="noise")])

        found = asyncio.run(CommentUpserter(host).find_marked_comment(PR))

        assert found is None
        assert len(host.calls_named("list")) == 1

    def test_stops_at_empty_page(self):
        comments = [Comment(id=i, body="noise") for i in range(1, 11)]
        host = FakeCommentHost(comments)

        found = asyncio.run(CommentUpserter(host, page_size=10).find_marked_comment(PR))

        assert found is None
        assert [call[1] for call in host.calls_named("list")] == [1, 2]

    def test_page_scan_is_bounded(self, caplog):
        comments = [Comment(id=i, body="noise") for i in range(1, 101)]
        host = FakeCommentHost(comments)

        found = asyncio.run(
            CommentUpserter(host, page_size=10, max_pages=3).find_marked_comment(PR)
        )

        assert found is None
        assert len(host.calls_named("list")) == 3
        assert "Stopped searching" in caplog.text

    def test_stops_at_first_marked_comment(self):
        comments = [
            Comment(id=1, body=f"{COMMENT_MARKER} first"),
            Comment(id=2, body=f"{COMMENT_MARKER} second"),
        ]
        host = FakeCommentHost(comments)

        found = asyncio.run(CommentUpserter(host).find_marked_comment(PR))

        assert found.id == 1

    def test_host_failure_is_swallowed(self, caplog):
        host = FakeCommentHost(fail_on="create")

        action = asyncio.run(CommentUpserter(host).upsert(PR, RESULTS, "### Videos", 3600))

        assert action is None
        assert "Failed to post PR comment" in caplog.text

    def test_list_failure_is_swallowed(self):
        host = FakeCommentHost(fail_on="list")

        action = asyncio.run(CommentUpserter(host).upsert(PR, RESULTS, "### Videos", 3600))

        assert action is None
        assert host.calls_named("create") == []
