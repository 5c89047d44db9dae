"""Tests for the async session facade."""

from pathlib import Path

import pytest

from marknote.session import NoteSession, note_base_name

PNG_BYTES = b"\x89PNG fake"


def test_note_base_name():
    assert note_base_name(Path("/notes/docs/My Note.md")) == "My Note"
    assert note_base_name(Path("plain.txt")) == "plain"


@pytest.mark.asyncio
async def test_shutdown_without_scan_does_nothing(notes_config, images_dir):
    (images_dir / "orphan.png").write_bytes(PNG_BYTES)
    session = NoteSession(notes_config)

    assert await session.shutdown() is None
    assert (images_dir / "orphan.png").exists()


@pytest.mark.asyncio
async def test_shutdown_sweeps_last_scanned_root_once(notes_root, notes_config, images_dir, write_note):
    """Test that shutdown cleans the root remembered from the last scan."""
    (images_dir / "orphan.png").write_bytes(PNG_BYTES)
    (images_dir / "kept.png").write_bytes(PNG_BYTES)
    write_note("n.md", "![](images/kept.png)")

    session = NoteSession(notes_config)
    notes = await session.scan_notes(notes_root)
    assert session.last_root == notes_root
    assert [n.id for n in notes] == ["n"]

    result = await session.shutdown()

    assert result.deleted_files == ["orphan.png"]
    assert (images_dir / "kept.png").exists()
    assert session.last_root is None
    assert await session.shutdown() is None


@pytest.mark.asyncio
async def test_session_note_lifecycle(notes_root, notes_config):
    session = NoteSession(notes_config)

    assert await session.check_root_exists(notes_root) is True
    assert await session.create_folder(notes_root, "docs") is True

    path = await session.create_note(notes_root, "docs", "Hello World")
    assert path == notes_root / "docs" / "hello-world.md"

    content = await session.get_note_content(path)
    assert content.meta.title == "Hello World"

    assert await session.save_note(path, "new body\n", {"title": "Hello World", "tags": ["x"]}) is True

    renamed = await session.rename_note(path, "Greeting")
    assert renamed == notes_root / "docs" / "greeting.md"

    moved = await session.move_note(notes_root, renamed, "")
    assert moved == notes_root / "greeting.md"

    notes = await session.scan_notes(notes_root)
    tree = await session.build_folder_tree(notes_root, notes)
    assert [n.title for n in tree.notes] == ["Greeting"]
    assert tree.find("docs").notes == []

    assert await session.delete_folder(notes_root, "docs") is True
    assert await session.delete_note(moved) is True


@pytest.mark.asyncio
async def test_delete_note_with_images(notes_root, notes_config, write_note):
    """Test that deleting a note can also remove the images it owned."""
    session = NoteSession(notes_config)
    path = write_note("My Note.md", "draft")

    saved = await session.images_save_from_buffer(notes_root, "My Note", PNG_BYTES, "png")
    assert saved.success is True
    image_path = notes_root / saved.relative_path
    path.write_text(f"![]({saved.relative_path})", encoding="utf-8")

    assert await session.delete_note(path, root=notes_root, with_images=True) is True

    assert not path.exists()
    assert not image_path.exists()


@pytest.mark.asyncio
async def test_delete_note_with_images_requires_root(notes_root, notes_config, write_note):
    session = NoteSession(notes_config)
    path = write_note("n.md", "x")

    with pytest.raises(ValueError):
        await session.delete_note(path, with_images=True)
    assert path.exists()


@pytest.mark.asyncio
async def test_images_cleanup_unused_through_session(notes_root, notes_config, images_dir, write_note):
    session = NoteSession(notes_config)
    source = images_dir.parent / "source.gif"
    source.write_bytes(PNG_BYTES)

    saved = await session.images_save_from_file(notes_root, "n", source)
    write_note("n.md", "image removed")

    result = await session.images_cleanup_unused(notes_root, "n", "image removed")

    assert result.deleted_files == [Path(saved.relative_path).name]


@pytest.mark.asyncio
async def test_shutdown_sweeps_root_that_only_received_images(notes_root, notes_config, images_dir):
    """Test that saving an image marks the root as used for the shutdown sweep."""
    (images_dir / "orphan.png").write_bytes(PNG_BYTES)
    session = NoteSession(notes_config)

    saved = await session.images_save_from_buffer(notes_root, "n", PNG_BYTES, "png")
    assert saved.success is True
    assert session.last_root == notes_root

    result = await session.shutdown()

    assert result is not None
    assert "orphan.png" in result.deleted_files
    assert not (images_dir / "orphan.png").exists()


@pytest.mark.asyncio
async def test_images_save_from_file_records_root(notes_root, notes_config, tmp_path):
    source = tmp_path / "pic.gif"
    source.write_bytes(PNG_BYTES)
    session = NoteSession(notes_config)

    await session.images_save_from_file(notes_root, "n", source)

    assert session.last_root == notes_root
