import sys
from pathlib import Path

# Add the project root (one level up from 'test') to sys.path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from SnapDict.core.controller import SnapDictController
from SnapDict.core.navigation import NavigationFrame, View
from SnapDict.core.session import OutputKind, SelectionOutput
from SnapDict.services.storage.history_store import HistoryStore
from SnapDict.services.storage.kv_storage import MemoryStorage


def _controller():
    c = SnapDictController(HistoryStore(MemoryStorage()))
    c.load()
    return c


def test_scanned_word_opens_its_detail_and_drops_scanner_frame():
    c = _controller()
    c.open_scanner()
    c.apply_selection(SelectionOutput(OutputKind.WORD, ("serendipity",)))
    assert c.selected_word.text == "Serendipity"
    assert c.nav.frames == [NavigationFrame(View.DETAIL, c.history[0].id)]
    assert c.handle_back()
    assert c.nav.current_view is View.LIST
    assert not c.handle_back()


def test_sentence_is_stored_as_one_entry():
    c = _controller()
    c.open_scanner()
    c.apply_selection(SelectionOutput(OutputKind.SENTENCE, ("hello, world",)))
    assert [w.text for w in c.history] == ["Hello, world"]


def test_batch_add_returns_to_list_in_reading_order():
    c = _controller()
    c.open_scanner()
    c.apply_selection(SelectionOutput(OutputKind.WORDS, ("a1", "b2", "c3")))
    assert [w.text for w in c.history] == ["A1", "B2", "C3"]
    assert c.nav.current_view is View.LIST
    assert c.nav.frames == []


def test_manual_add_selects_new_word():
    c = _controller()
    assert c.manual_add("   ") is None
    item = c.manual_add("quokka")
    assert c.selected_word == item


def test_select_word_replaces_detail():
    c = _controller()
    c.manual_add("one")
    c.manual_add("two")
    c.select_word(c.history[1].id)
    assert len(c.nav.frames) == 1
    assert c.selected_word.text == "One"


def test_delete_selected_word_closes_detail():
    c = _controller()
    item = c.manual_add("gone")
    c.delete_word(item.id)
    assert c.history == []
    assert c.selected_word is None
    assert c.nav.current_view is View.LIST


def test_edit_word_updates_history():
    c = _controller()
    item = c.manual_add("teh")
    c.edit_word(item.id, "the")
    assert c.selected_word.text == "the"


def test_listeners_fire_on_changes():
    c = _controller()
    calls = []
    c.subscribe(lambda: calls.append(1))
    c.manual_add("ping")
    assert calls


class ReadOnlyStorage(MemoryStorage):
    def set_item(self, key, value):
        raise OSError("read-only file system")


def test_failed_save_leaves_state_untouched():
    c = SnapDictController(HistoryStore(ReadOnlyStorage()))
    c.load()
    assert c.manual_add("hello") is None
    assert c.history == []
    assert c.nav.current_view is View.LIST

    c.open_scanner()
    c.apply_selection(SelectionOutput(OutputKind.WORD, ("hello",)))
    assert c.nav.current_view is View.SCANNER
    assert c.history == []
