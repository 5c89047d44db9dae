"""Tests for filename sanitizing and unique naming."""

from marknote.filenames import (
    generate_unique_filename,
    note_id_from_path,
    sanitize_note_base,
    sanitize_note_filename,
)


def test_sanitize_note_filename_replaces_and_lowercases():
    assert sanitize_note_filename("My Note") == "my-note"
    assert sanitize_note_filename('a<b>c:d"e/f\\g|h?i*j') == "a-b-c-d-e-f-g-h-i-j"
    assert sanitize_note_filename("Tabs\tand   spaces") == "tabs-and-spaces"


def test_sanitize_note_base_keeps_case():
    assert sanitize_note_base("My Note") == "My_Note"
    assert sanitize_note_base("what? why*") == "what__why_"


def test_sanitizers_are_idempotent():
    for title in ["My Note", "a/b\\c", "  padded  ", "Already-clean"]:
        once = sanitize_note_filename(title)
        assert sanitize_note_filename(once) == once

        base = sanitize_note_base(title)
        assert sanitize_note_base(base) == base


def test_sanitizers_do_not_truncate():
    title = "x" * 500
    assert sanitize_note_filename(title) == title
    assert sanitize_note_base(title) == title


def test_note_id_from_path_strips_extension_and_normalizes_separators():
    assert note_id_from_path("docs/sub/deep.md") == "docs/sub/deep"
    assert note_id_from_path("docs\\win.md") == "docs/win"
    assert note_id_from_path("readme.txt") == "readme.txt"


def test_generate_unique_filename_probes_numeric_suffixes(tmp_path):
    """Test that collisions are resolved with -1, -2, ... suffixes."""
    assert generate_unique_filename(tmp_path, "note", ".md") == tmp_path / "note.md"

    (tmp_path / "note.md").touch()
    assert generate_unique_filename(tmp_path, "note", ".md") == tmp_path / "note-1.md"

    (tmp_path / "note-1.md").touch()
    assert generate_unique_filename(tmp_path, "note", ".md") == tmp_path / "note-2.md"
