"""Tests for the TabGroupMenu facade."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tabmarks.ui.application.coordinator import TabGroupMenu
from tabmarks.ui.domain.tab_group_store import TabGroupStore
from tabmarks.ui.models.dialog_models import DialogKind
from tests.helpers import FakeClipboard, FakeOpener, FakeService, make_group

URLS = [f"https://example.test/{index}" for index in range(3)]


@pytest.fixture
def folder():
    return make_group("f1", title="Folder", is_folder=True, position=2)


@pytest.fixture
def group():
    return make_group("g1", *URLS, "https://example.test/0", parent_id="f1", position=5)


@pytest.fixture
def service(folder, group) -> FakeService:
    return FakeService([folder, group])


@pytest.fixture
def store(event_bus, folder, group) -> TabGroupStore:
    return TabGroupStore(event_bus, [folder, group])


@pytest.fixture
def opener() -> FakeOpener:
    return FakeOpener()


@pytest.fixture
def menu(event_bus, dialog_store, store, service, opener) -> TabGroupMenu:
    return TabGroupMenu(event_bus, dialog_store, store, service, opener, clipboard=FakeClipboard())


class TestOpen:
    @pytest.mark.asyncio
    async def test_open_in_new_window(self, menu, opener, group, responder) -> None:
        report = await menu.on_open_in_new_window(group)

        assert opener.opened == [*URLS, "https://example.test/0"]
        assert report.succeeded == 4

    @pytest.mark.asyncio
    async def test_open_in_current_window(self, menu, opener, group, responder) -> None:
        await menu.on_open_in_current_window(group)
        assert opener.opened == [URLS[0]]

    @pytest.mark.asyncio
    async def test_progress_factory_is_used(self, menu, group, responder) -> None:
        reporter = MagicMock()
        menu.set_progress_factory(lambda: reporter)

        await menu.on_open_in_incognito(group)

        reporter.started.assert_called_once()
        reporter.finished.assert_called_once()


class TestFolders:
    @pytest.mark.asyncio
    async def test_create_above_uses_group_position(self, menu, service, group, responder) -> None:
        await menu.on_create_folder_above(group)
        assert service.calls_to("create_folder") == [(("New folder", "f1"), {"position": 5})]

    @pytest.mark.asyncio
    async def test_create_below_uses_next_position(self, menu, service, group, responder) -> None:
        await menu.on_create_folder_below(group)
        assert service.calls_to("create_folder") == [(("New folder", "f1"), {"position": 6})]

    @pytest.mark.asyncio
    async def test_create_inside_folder(self, menu, service, folder, responder) -> None:
        assert await menu.on_create_folder_inside(folder) is True
        assert service.calls_to("create_folder") == [(("New folder", "f1"), {"position": None})]

    @pytest.mark.asyncio
    async def test_create_inside_plain_group_is_refused(self, menu, service, group, responder) -> None:
        assert await menu.on_create_folder_inside(group) is False
        assert service.calls == []
        assert responder.last_alert.kind is DialogKind.INFO


class TestActions:
    @pytest.mark.asyncio
    async def test_remove_duplicates_refreshes_from_service(
        self, menu, service, store, group, responder
    ) -> None:
        report = await menu.on_remove_duplicates(group)

        assert report.succeeded == 1
        assert service.calls_to("list_tab_groups") == [((), {})]

    @pytest.mark.asyncio
    async def test_move_and_lock(self, menu, store, group, responder) -> None:
        await menu.on_move(group, None)
        await menu.on_lock(store.get("g1"))

        moved = store.get("g1")
        assert moved.parent_id is None
        assert moved.is_locked

    @pytest.mark.asyncio
    async def test_use_cases_are_reused(self, menu, store, group, responder) -> None:
        await menu.on_pin_to_top(group)
        await menu.on_rename(group, "Renamed")

        assert store.get("g1").title == "Renamed"
        assert store.get("g1").position == -1

    @pytest.mark.asyncio
    async def test_share_falls_back_to_browser_clipboard(
        self, event_bus, dialog_store, store, service, group, responder
    ) -> None:
        browser = MagicMock()
        browser.copy_to_clipboard.return_value = True
        menu = TabGroupMenu(event_bus, dialog_store, store, service, browser)

        await menu.on_share(group)

        browser.copy_to_clipboard.assert_called_once_with(service.share_url)

    @pytest.mark.asyncio
    async def test_item_actions(self, menu, service, store, group, responder) -> None:
        item = group.items[1]

        await menu.on_toggle_item_todo(group, item)
        await menu.on_rename_item(group, item, "Second")
        await menu.on_delete_item(group, store.get("g1").items[1])

        assert [entry.id for entry in store.get("g1").items] == ["g1-0", "g1-2", "g1-3"]
        assert service.calls_to("update_tab_group_item")[0] == (("g1-1",), {"is_todo": 1})

    @pytest.mark.asyncio
    async def test_archive_and_move_item(self, menu, service, store, group, responder) -> None:
        store.set_groups([*store.groups, make_group("g2", title="Inbox")])
        targets = menu.item_move_targets(group)

        assert [target.id for target in targets] == ["g2"]
        assert await menu.on_archive_item(group, group.items[0]) is True
        assert await menu.on_move_item(group, group.items[1], targets[0]) is True

        assert [entry.id for entry in store.get("g1").items] == ["g1-2", "g1-3"]
        assert [entry.id for entry in store.get("g2").items] == ["g1-1"]
        assert service.calls_to("update_tab_group_item") == [(("g1-0",), {"is_archived": 1})]
        assert len(responder.confirmations) == 2

    @pytest.mark.asyncio
    async def test_export_uses_path_provider(self, menu, group, tmp_path, responder) -> None:
        provider = MagicMock()
        provider.prompt_export_path.return_value = tmp_path / "g.md"
        menu.set_export_path_provider(provider)

        assert await menu.on_export_markdown(group) == tmp_path / "g.md"
        assert (tmp_path / "g.md").exists()

    @pytest.mark.asyncio
    async def test_move_to_trash_and_copy(self, menu, store, group, responder) -> None:
        assert await menu.on_copy_to_clipboard(group) is True
        assert await menu.on_move_to_trash(group) is True
        assert store.get("g1") is None
