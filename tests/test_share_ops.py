"""Tests for share, clipboard and Markdown export use cases."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tabmarks.services.settings import Settings
from tabmarks.ui.application.share_ops import (
    CopyGroupToClipboardUseCase,
    ExportMarkdownUseCase,
    ShareGroupUseCase,
    format_group_as_text,
    render_markdown,
    suggested_export_name,
)
from tabmarks.ui.events import ToastPosted
from tabmarks.ui.models.dialog_models import DialogKind
from tabmarks.ui.models.tab_group_models import TabGroup, TabGroupItem
from tests.helpers import FakeClipboard, FakeService, make_group, service_error


@pytest.fixture
def group() -> TabGroup:
    return TabGroup(
        id="g1",
        title="Research: sources",
        tags=("work", "ml"),
        created_at="2024-03-05T09:30:00Z",
        items=(
            TabGroupItem(id="i1", title="Paper", url="https://arxiv.test/1", is_pinned=True),
            TabGroupItem(id="i2", title="Blog", url="https://blog.test/post", is_todo=True),
        ),
    )


@pytest.fixture
def toasts(event_bus) -> list[ToastPosted]:
    received: list[ToastPosted] = []
    event_bus.subscribe(ToastPosted, received.append)
    return received


# =============================================================================
# Share
# =============================================================================


class TestShare:
    @pytest.mark.asyncio
    async def test_share_copies_link_and_reports_success(self, dialog_store, responder, group) -> None:
        service = FakeService()
        clipboard = FakeClipboard()
        use_case = ShareGroupUseCase(dialog_store, service, clipboard)

        url = await use_case.execute(group)

        assert url == service.share_url
        assert service.calls_to("create_share") == [
            (("g1",), {"is_public": True, "expires_in_days": 30})
        ]
        assert clipboard.copied == [service.share_url]
        alert = responder.last_alert
        assert alert.kind is DialogKind.SUCCESS
        assert alert.title == "Share link created"
        assert service.share_url in alert.message

    @pytest.mark.asyncio
    async def test_expiry_comes_from_settings(self, dialog_store, responder, group) -> None:
        service = FakeService()
        settings = Settings(share_expires_in_days=7)
        use_case = ShareGroupUseCase(
            dialog_store, service, FakeClipboard(), settings_provider=lambda: settings
        )

        await use_case.execute(group)

        assert service.calls_to("create_share")[0][1]["expires_in_days"] == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "clipboard",
        [FakeClipboard(result=False), FakeClipboard(error=RuntimeError("denied"))],
        ids=["returns-false", "raises"],
    )
    async def test_clipboard_failure_shows_link_for_manual_copy(
        self, dialog_store, responder, group, clipboard
    ) -> None:
        service = FakeService()
        use_case = ShareGroupUseCase(dialog_store, service, clipboard)

        url = await use_case.execute(group)

        assert url == service.share_url
        alert = responder.last_alert
        assert alert.kind is DialogKind.WARNING
        assert service.share_url in alert.message
        assert "manually" in alert.message

    @pytest.mark.asyncio
    async def test_creation_failure_raises_error(self, dialog_store, responder, group) -> None:
        clipboard = FakeClipboard()
        use_case = ShareGroupUseCase(
            dialog_store, FakeService(error=service_error("forbidden", 403)), clipboard
        )

        assert await use_case.execute(group) is None

        assert clipboard.copied == []
        assert responder.last_alert.kind is DialogKind.ERROR
        assert responder.last_alert.message == "Failed to create share link"

    @pytest.mark.asyncio
    async def test_async_clipboard_is_awaited(self, dialog_store, responder, group) -> None:
        copied: list[str] = []

        class AsyncClipboard:
            async def copy_to_clipboard(self, text: str) -> bool:
                copied.append(text)
                return True

        use_case = ShareGroupUseCase(dialog_store, FakeService(), AsyncClipboard())

        await use_case.execute(group)

        assert copied == ["https://tabmarks.test/s/abc123"]
        assert responder.last_alert.kind is DialogKind.SUCCESS


# =============================================================================
# Copy to clipboard
# =============================================================================


class TestCopy:
    def test_format_group_as_text(self, group) -> None:
        assert format_group_as_text(group) == (
            "Paper\nhttps://arxiv.test/1\n\nBlog\nhttps://blog.test/post"
        )

    @pytest.mark.asyncio
    async def test_copy_posts_toast(self, dialog_store, event_bus, responder, toasts, group) -> None:
        clipboard = FakeClipboard()
        use_case = CopyGroupToClipboardUseCase(dialog_store, clipboard, event_bus)

        assert await use_case.execute(group) is True

        assert clipboard.copied == [format_group_as_text(group)]
        assert [toast.message for toast in toasts] == ["Copied 2 links"]
        assert responder.alerts == []

    @pytest.mark.asyncio
    async def test_empty_group_reports_info(self, dialog_store, event_bus, responder) -> None:
        clipboard = FakeClipboard()
        use_case = CopyGroupToClipboardUseCase(dialog_store, clipboard, event_bus)

        assert await use_case.execute(make_group("empty")) is False

        assert clipboard.copied == []
        assert responder.last_alert.kind is DialogKind.INFO

    @pytest.mark.asyncio
    async def test_clipboard_error_reports_error(self, dialog_store, event_bus, responder, group) -> None:
        use_case = CopyGroupToClipboardUseCase(
            dialog_store, FakeClipboard(error=OSError("locked")), event_bus
        )

        assert await use_case.execute(group) is False
        assert responder.last_alert.kind is DialogKind.ERROR


# =============================================================================
# Markdown export
# =============================================================================


class TestExport:
    def test_render_markdown(self, group) -> None:
        text = render_markdown(group)

        assert text.startswith("# Research: sources\n\nCreated: 2024-03-05 09:30\nTabs: 2\n")
        assert "Tags: work, ml" in text
        assert "1. [Paper](https://arxiv.test/1)\n   - Pinned\n" in text
        assert "2. [Blog](https://blog.test/post)\n   - To-do\n" in text

    def test_render_markdown_without_tags_or_date(self) -> None:
        text = render_markdown(make_group("g2", "https://a", title="Plain"))

        assert "Created: unknown" in text
        assert "Tags:" not in text

    def test_suggested_name_strips_unsafe_characters(self, group) -> None:
        assert suggested_export_name(group) == "Research sources.md"
        assert suggested_export_name(make_group("g", title="///")) == "tab-group.md"

    @pytest.mark.asyncio
    async def test_export_to_prompted_path(self, dialog_store, event_bus, toasts, group, tmp_path) -> None:
        target = tmp_path / "out" / "group.md"
        provider = MagicMock()
        provider.prompt_export_path.return_value = target
        use_case = ExportMarkdownUseCase(dialog_store, event_bus, provider)

        assert await use_case.execute(group) == target

        provider.prompt_export_path.assert_called_once_with("Research sources.md")
        assert target.read_text(encoding="utf-8") == render_markdown(group)
        assert [toast.message for toast in toasts] == ["Exported to group.md"]

    @pytest.mark.asyncio
    async def test_cancelled_prompt_writes_nothing(self, dialog_store, event_bus, toasts, group) -> None:
        provider = MagicMock()
        provider.prompt_export_path.return_value = None
        writer = MagicMock()
        use_case = ExportMarkdownUseCase(dialog_store, event_bus, provider, file_writer=writer)

        assert await use_case.execute(group) is None

        writer.assert_not_called()
        assert toasts == []

    @pytest.mark.asyncio
    async def test_write_error_reports_error(self, dialog_store, event_bus, responder, group) -> None:
        writer = MagicMock(side_effect=PermissionError("read-only"))
        use_case = ExportMarkdownUseCase(dialog_store, event_bus, file_writer=writer)

        assert await use_case.execute(group, Path("/tmp/x.md")) is None
        assert responder.last_alert.kind is DialogKind.ERROR
