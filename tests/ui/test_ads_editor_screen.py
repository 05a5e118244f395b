"""UI tests for the ads editor screen and its prompt dialog.

These tests use Textual pilot to simulate keyboard interactions against an
editor whose ads API is mocked.
"""

import pytest
from textual.widgets import Tabs

from adsmith.models.block import Zone
from adsmith.services.editor import AdsEditor
from adsmith.tui.app import AdsmithApp
from adsmith.tui.screens import AdsEditorScreen, PromptDialog
from adsmith.tui.widgets import BlockList, ContentEditor, StatusPanel


@pytest.fixture
def editor(config, fake_client):
    return AdsEditor(config, client=fake_client)


@pytest.fixture
def app(editor):
    return AdsmithApp(editor, auto_load=False)


async def settle(pilot, rounds=3):
    for _ in range(rounds):
        await pilot.pause()


@pytest.mark.asyncio
async def test_screen_shows_site_and_zone(app):
    """Test the editor screen opens on the first site's top zone."""
    async with app.run_test() as pilot:
        await pilot.pause()

        assert isinstance(app.screen, AdsEditorScreen)
        status = app.screen.query_one(StatusPanel)
        assert status.site == "a1satta.pro"
        assert status.zone == Zone.TOP


@pytest.mark.asyncio
async def test_auto_load_fetches_ads(editor, fake_client, persisted):
    """Test the app loads the active site on start."""
    fake_client.list_ads.return_value = [persisted("t1", Zone.TOP, 0, "<p>Hello</p>")]
    app = AdsmithApp(editor)

    async with app.run_test() as pilot:
        await settle(pilot)

        fake_client.list_ads.assert_awaited_once_with("a1satta.pro")
        block_list = app.screen.query_one(BlockList)
        assert [block.key for block in block_list.blocks] == ["t1"]
        assert app.screen.query_one(ContentEditor).text == "<p>Hello</p>"


@pytest.mark.asyncio
async def test_add_block(app, editor):
    """Test 'a' adds a block to the current zone and opens it."""
    async with app.run_test() as pilot:
        await pilot.pause()

        await pilot.press("a")
        await pilot.pause()

        assert len(editor.store.zone_blocks(Zone.TOP)) == 1
        block_list = app.screen.query_one(BlockList)
        assert len(block_list.blocks) == 1
        assert app.screen.query_one(ContentEditor).surface is not None


@pytest.mark.asyncio
async def test_move_block_up(app, editor):
    """Test 'K' moves the highlighted block up."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("a", "a")
        await pilot.pause()
        second = editor.store.zone_blocks(Zone.TOP)[1]
        block_list = app.screen.query_one(BlockList)
        assert block_list.index == 1

        await pilot.press("K")
        await pilot.pause()

        assert editor.store.zone_blocks(Zone.TOP)[0].key == second.key
        assert block_list.index == 0


@pytest.mark.asyncio
async def test_switch_zone_tab(app, editor):
    """Test activating another tab shows that zone."""
    async with app.run_test() as pilot:
        await pilot.pause()
        editor.add(Zone.MIDDLE)

        app.screen.query_one(Tabs).active = Zone.MIDDLE.value
        await settle(pilot)

        assert app.screen.zone == Zone.MIDDLE
        assert app.screen.query_one(StatusPanel).zone == Zone.MIDDLE
        assert len(app.screen.query_one(BlockList).blocks) == 1


@pytest.mark.asyncio
async def test_quick_add_dialog(app, editor):
    """Test the quick add choice is shown in a dialog and answered."""
    async with app.run_test() as pilot:
        await pilot.pause()

        await pilot.press("q")
        await settle(pilot)

        assert isinstance(app.screen, PromptDialog)
        assert editor.prompts.current.title == "Quick Add"

        editor.prompts.submit("middle")
        await settle(pilot)

        assert not isinstance(app.screen, PromptDialog)
        assert len(editor.store.zone_blocks(Zone.MIDDLE)) == 1


@pytest.mark.asyncio
async def test_escape_dismisses_dialog(app, editor):
    """Test escape closes the dialog without an answer."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("q")
        await settle(pilot)

        await pilot.press("escape")
        await settle(pilot)

        assert editor.prompts.current is None
        assert not isinstance(app.screen, PromptDialog)
        assert len(editor.store) == 0


@pytest.mark.asyncio
async def test_confirm_dialog_no_button(app, editor, fake_client):
    """Test answering 'No' to save all saves nothing."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("S")
        await settle(pilot)
        assert isinstance(app.screen, PromptDialog)
        assert editor.prompts.current.title == "Save All"

        await pilot.click("#prompt-no")
        await settle(pilot)

        fake_client.upsert_batch.assert_not_awaited()
        assert not isinstance(app.screen, PromptDialog)


@pytest.mark.asyncio
async def test_confirm_dialog_answers_only_yes_or_no(app, editor):
    """Test a confirmation offers Yes and No but no Cancel button."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("S")
        await settle(pilot)

        dialog = app.screen
        assert isinstance(dialog, PromptDialog)
        assert len(dialog.query("#prompt-yes")) == 1
        assert len(dialog.query("#prompt-no")) == 1
        assert len(dialog.query("#prompt-cancel")) == 0

        await pilot.press("escape")
        await settle(pilot)


@pytest.mark.asyncio
async def test_text_dialog_keeps_cancel(app, editor):
    """Test free-text questions can still be cancelled."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("a")
        await pilot.pause()
        await pilot.press("e")
        await settle(pilot)

        assert len(app.screen.query("#prompt-cancel")) == 1

        await pilot.click("#prompt-cancel")
        await settle(pilot)

        assert editor.prompts.current is None
        assert not isinstance(app.screen, PromptDialog)


@pytest.mark.asyncio
async def test_text_dialog_inserts_emoji(app, editor):
    """Test text typed in the emoji dialog is inserted into the block."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("a")
        await pilot.pause()

        await pilot.press("e")
        await settle(pilot)
        assert isinstance(app.screen, PromptDialog)

        await pilot.press("x", "enter")
        await settle(pilot)

        block = editor.store.zone_blocks(Zone.TOP)[0]
        assert editor.surface(block).html == "x"
        assert app.screen.query_one(ContentEditor).text == "x"
        assert editor.store.zone_blocks(Zone.TOP)[0].content == "x"


@pytest.mark.asyncio
async def test_failed_command_shows_notice(app, editor):
    """Test a failing command is reported in the status bar."""
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("a")
        await pilot.pause()

        await pilot.press("r")
        await settle(pilot)
        editor.prompts.submit("100")
        await settle(pilot)

        notice = app.screen.query_one(StatusPanel).notice
        assert notice is not None
        assert notice.level == "error"
        assert notice.message == "No image to resize"
