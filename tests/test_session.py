"""Tests for EditSession: load/edit/save and dirty tracking."""

import pytest

from pls_editor import (
    EditSession,
    IndexOutOfRangeError,
    InMemoryStorageGateway,
    InvalidNameError,
    LexiconEntry,
    LoadError,
    MissingLexiconRootError,
    NEW_ENTRY_LABEL,
    NoFileLoadedError,
    NoSelectionError,
    NotFoundError,
    SessionState,
    TransportError,
    ValidationError,
    decode,
)


class FailingPutGateway(InMemoryStorageGateway):
    """Gateway whose uploads always fail."""

    def put(self, name, text, content_type="application/xml"):
        raise TransportError("connection reset")


class TestInitialState:
    """A fresh session before any file is loaded."""

    def test_starts_empty(self, session):
        assert session.current_file_name == ""
        assert session.entries == ()
        assert session.selected_index is None
        assert not session.is_loaded
        assert not session.is_dirty
        assert session.language == "en-US"

    def test_default_language_option(self, gateway):
        session = EditSession(gateway, default_language="de-DE")
        session.create_new("neu")
        assert session.language == "de-DE"


class TestOpen:
    """Fetching and decoding an existing lexicon."""

    def test_open_is_clean(self, session):
        state = session.open("sample.xml")
        assert isinstance(state, SessionState)
        assert state.file_name == "sample.xml"
        assert state.language == "en-GB"
        assert len(state.entries) == 3
        assert state.selected_index == 0
        assert not state.is_dirty
        assert session.saved_entries == session.entries

    def test_open_empty_lexicon_selects_none(self, gateway, session):
        gateway.put("empty.xml", "<lexicon/>")
        session.open("empty.xml")
        assert session.selected_index is None
        assert session.entries == ()

    def test_missing_blob_propagates(self, session):
        with pytest.raises(NotFoundError):
            session.open("nope.xml")
        assert not session.is_loaded

    def test_decode_failure_leaves_state(self, gateway, loaded_session):
        gateway.put("broken.xml", "<lexicon><lexeme>")
        gateway.put("wrong.xml", "<dictionary/>")
        before = loaded_session.snapshot()

        with pytest.raises(LoadError):
            loaded_session.open("broken.xml")
        with pytest.raises(LoadError) as excinfo:
            loaded_session.open("wrong.xml")

        assert isinstance(excinfo.value.__cause__, MissingLexiconRootError)
        assert loaded_session.snapshot() == before


class TestDirtyTracking:
    """Working entries compared to the saved snapshot."""

    def test_mutation_makes_dirty(self, loaded_session):
        loaded_session.set_alias("tomato alias", 0)
        assert loaded_session.is_dirty

    def test_reverting_change_is_clean(self, loaded_session):
        original = loaded_session.entries[0].graphemes[0]
        loaded_session.set_grapheme(0, "tomahto", 0)
        assert loaded_session.is_dirty
        loaded_session.set_grapheme(0, original, 0)
        assert not loaded_session.is_dirty

    def test_save_makes_clean(self, gateway, loaded_session):
        loaded_session.add_entry()
        assert loaded_session.is_dirty
        state = loaded_session.save()
        assert not state.is_dirty
        assert not loaded_session.is_dirty
        assert decode(gateway.blobs["sample.xml"]).entries == loaded_session.entries
        assert gateway.content_types["sample.xml"] == "application/xml"

    def test_failed_save_stays_dirty(self, sample_xml):
        session = EditSession(FailingPutGateway({"sample.xml": sample_xml}))
        session.open("sample.xml")
        session.delete_entry(0)
        with pytest.raises(TransportError):
            session.save()
        assert session.is_dirty
        assert len(session.saved_entries) == 3


class TestCreateNew:
    """Starting an unsaved lexicon from a name."""

    def test_invalid_name(self, session):
        with pytest.raises(InvalidNameError):
            session.create_new("my lex!")
        assert not session.is_loaded

    def test_invalid_name_is_validation_error(self, session):
        with pytest.raises(ValidationError):
            session.create_new("   ")

    @pytest.mark.parametrize("name, expected", [
        ("my-lex", "my-lex.xml"),
        ("my_lex.xml", "my_lex.xml"),
        ("  Lex01  ", "Lex01.xml"),
    ])
    def test_valid_names(self, session, name, expected):
        state = session.create_new(name)
        assert state.file_name == expected

    def test_uppercase_extension_rejected(self, session):
        with pytest.raises(InvalidNameError):
            session.create_new("lex.XML")

    def test_new_lexicon_state(self, session):
        state = session.create_new("my-lex", "fr-CA")
        assert state.language == "fr-CA"
        assert state.entries == (LexiconEntry(graphemes=(NEW_ENTRY_LABEL,)),)
        assert state.selected_index == 0
        assert state.is_dirty
        assert session.saved_entries == ()
        assert session.known_files[0] == "my-lex.xml"

    def test_save_new_lexicon(self, gateway, session):
        session.create_new("fresh", "ja-JP")
        session.save()
        assert not session.is_dirty
        lexicon = decode(gateway.blobs["fresh.xml"])
        assert lexicon.language == "ja-JP"
        assert lexicon.entries[0].label == NEW_ENTRY_LABEL


class TestDuplicate:
    """Copying the current lexicon to a new file name."""

    def test_requires_file(self, session):
        with pytest.raises(NoFileLoadedError):
            session.duplicate()

    def test_duplicate(self, loaded_session):
        entries = loaded_session.entries
        state = loaded_session.duplicate()
        assert state.file_name == "duplicate-of-sample.xml"
        assert state.entries == entries
        assert state.is_dirty
        assert state.selected_index == 0
        assert "duplicate-of-sample.xml" in loaded_session.known_files

    def test_duplicate_strips_extension_case_insensitive(self, gateway, session):
        gateway.put("Mixed.XML", "<lexicon/>")
        session.open("Mixed.XML")
        state = session.duplicate()
        assert state.file_name == "duplicate-of-Mixed.xml"
        assert state.selected_index is None

    def test_duplicate_save_keeps_original(self, gateway, loaded_session, sample_xml):
        loaded_session.duplicate()
        loaded_session.set_phoneme("new", 1)
        loaded_session.save()
        assert gateway.blobs["sample.xml"] == sample_xml
        assert decode(gateway.blobs["duplicate-of-sample.xml"]).entries[1].phoneme == "new"


class TestSave:
    """Uploading the working entries."""

    def test_requires_file(self, session):
        with pytest.raises(NoFileLoadedError):
            session.save()

    def test_save_does_not_change_known_files(self, loaded_session):
        loaded_session.refresh_files()
        before = loaded_session.known_files
        loaded_session.save()
        assert loaded_session.known_files == before

    def test_refresh_files(self, session):
        assert session.refresh_files() == ["sample.xml", "simple.xml"]


class TestSelection:
    """Selecting and clearing the current entry."""

    def test_select(self, loaded_session):
        state = loaded_session.select(2)
        assert state.selected_index == 2
        assert loaded_session.selected_entry.graphemes == ("colour", "color")

    @pytest.mark.parametrize("index", [3, -1, True, False, "1"])
    def test_select_out_of_range(self, loaded_session, index):
        with pytest.raises(IndexOutOfRangeError):
            loaded_session.select(index)
        assert loaded_session.selected_index == 0

    def test_select_none(self, loaded_session):
        loaded_session.select_none()
        assert loaded_session.selected_index is None
        assert loaded_session.selected_entry is None


class TestEntryMutations:
    """Edits applied to the selected or given entry."""

    def test_require_file(self, session):
        with pytest.raises(NoFileLoadedError):
            session.add_entry()
        with pytest.raises(NoFileLoadedError):
            session.set_alias("x", 0)

    def test_add_entry_selects_it(self, loaded_session):
        state = loaded_session.add_entry()
        assert state.selected_index == 3
        assert state.entries[3].label == NEW_ENTRY_LABEL

    def test_delete_clears_selection(self, loaded_session):
        loaded_session.select(1)
        state = loaded_session.delete_entry()
        assert state.selected_index is None
        assert [e.label for e in state.entries] == ["tomato", "colour"]

    def test_delete_without_selection(self, loaded_session):
        loaded_session.select_none()
        with pytest.raises(NoSelectionError):
            loaded_session.delete_entry()

    def test_edits_target_selected_entry(self, loaded_session):
        loaded_session.select(1)
        loaded_session.add_grapheme()
        loaded_session.set_grapheme(1, "W3 Consortium")
        loaded_session.set_phoneme("ˌdʌbəljuː θriː ˈsiː")
        entry = loaded_session.entries[1]
        assert entry.graphemes == ("W3C", "W3 Consortium")
        assert entry.phoneme == "ˌdʌbəljuː θriː ˈsiː"

    def test_remove_variant_grapheme(self, loaded_session):
        loaded_session.remove_grapheme(1, entry_index=2)
        assert loaded_session.entries[2].graphemes == ("colour",)

    def test_primary_grapheme_protected(self, loaded_session):
        with pytest.raises(ValidationError):
            loaded_session.remove_grapheme(0, entry_index=0)
        assert loaded_session.entries[0].graphemes == ("tomato",)
        assert not loaded_session.is_dirty

    def test_bad_index_leaves_state(self, loaded_session):
        before = loaded_session.snapshot()
        with pytest.raises(IndexOutOfRangeError):
            loaded_session.set_grapheme(5, "x", entry_index=0)
        assert loaded_session.snapshot() == before

    def test_filter(self, loaded_session):
        assert [i for i, _ in loaded_session.filter("color")] == [2]


class TestListeners:
    """Change notifications to subscribers."""

    def test_listener_receives_states(self, session):
        seen = []
        session.subscribe(seen.append)
        session.create_new("watched")
        session.add_entry()
        session.save()
        assert [s.is_dirty for s in seen] == [True, True, False]
        assert seen[1].selected_index == 1

    def test_unsubscribe(self, session):
        seen = []
        unsubscribe = session.subscribe(seen.append)
        session.create_new("watched")
        unsubscribe()
        session.add_entry()
        assert len(seen) == 1

    def test_failed_operation_not_announced(self, session):
        seen = []
        session.subscribe(seen.append)
        with pytest.raises(InvalidNameError):
            session.create_new("bad name")
        assert seen == []


class TestExport:
    """Writing the encoded lexicon to a local file."""

    def test_export_writes_xml(self, tmp_path, loaded_session):
        path = loaded_session.export(tmp_path / "out.xml")
        text = path.read_text(encoding="utf-8")
        assert text == loaded_session.to_xml()
        assert decode(text).entries == loaded_session.entries

    def test_export_requires_file(self, tmp_path, session):
        with pytest.raises(NoFileLoadedError):
            session.export(tmp_path / "out.xml")
