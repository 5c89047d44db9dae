"""Typer-based CLI for Marknote."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from . import images
from .config import MarknoteConfig
from .errors import MarknoteError
from .folders import collect_tags, filter_notes_by_folder, filter_notes_by_tag, sort_notes
from .models import FolderNode
from .paths import NOTE_SUFFIX, NotePaths
from .session import NoteSession, note_base_name

app = typer.Typer(
    name="marknote",
    help="Marknote - Markdown notes stored as plain files",
    add_completion=False,
)

console = Console()

# Set by the app callback, read when a command loads its configuration
_cli_state = {"log_level": None}

ROOT_HELP = "Notes root directory (default: .marknote/config.toml or MARKNOTE_ROOT env)"


@app.callback()
def _main_options(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: config log_level or WARNING)",
    ),
):
    """Marknote - Markdown notes stored as plain files."""
    _cli_state["log_level"] = log_level


def _setup_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _open_root(root: Optional[str]) -> tuple[MarknoteConfig, NotePaths]:
    """Load configuration and require an existing notes root, or exit with code 1."""
    try:
        config = MarknoteConfig.from_env(root)
        _setup_logging(_cli_state["log_level"] or config.log_level)
        paths = NotePaths.require(config)
    except MarknoteError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    return config, paths


def _resolve_note(paths: NotePaths, note: str) -> Path:
    """Resolve a note argument given relative to the root or as an absolute path."""
    note_path = Path(note).expanduser()
    if not note_path.is_absolute():
        note_path = paths.root / note_path
    if not note_path.is_file() or not note_path.name.endswith(NOTE_SUFFIX):
        console.print(f"[red]Error: Note not found: {escape(str(note_path))}[/red]")
        raise typer.Exit(code=1)
    return note_path


def _display(paths: NotePaths, path: Path) -> str:
    try:
        return paths.relative(path)
    except ValueError:
        return str(path)


def _print_cleanup(result, empty_message: str) -> None:
    for file_name in result.deleted_files:
        console.print(f"[green]-[/green] Deleted {escape(file_name)}")
    for error in result.errors:
        console.print(f"[red]{escape(error)}[/red]")
    if not result.deleted_files and not result.errors:
        console.print(f"[dim]{empty_message}[/dim]")


@app.command()
def scan(
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
    folder: Optional[str] = typer.Option(
        None,
        "--folder",
        "-f",
        help="Only list notes directly inside this folder ('' for the root)",
    ),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only list notes with this tag"),
    sort: str = typer.Option(
        "updated",
        "--sort",
        help="Sort key: updated, created or title",
    ),
):
    """List every note under the root with its title, tags and timestamps."""
    if sort not in ("updated", "created", "title"):
        console.print(f"[red]Error: Unknown sort key: {escape(sort)}[/red]")
        raise typer.Exit(code=1)

    config, paths = _open_root(root)
    session = NoteSession(config)
    notes = asyncio.run(session.scan_notes(paths.root))

    if folder is not None:
        notes = filter_notes_by_folder(notes, folder)
    if tag:
        notes = filter_notes_by_tag(notes, tag)
    notes = sort_notes(notes, key=sort, descending=sort != "title")

    if not notes:
        console.print("[dim]No notes found[/dim]")
        return

    table = Table(title=f"{len(notes)} Note(s)")
    table.add_column("Title", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Tags", style="magenta")
    table.add_column("Updated", style="yellow", no_wrap=True)

    for note in notes:
        table.add_row(
            escape(note.title),
            escape(Path(note.relative_path).as_posix()),
            escape(", ".join(note.tags)) or "-",
            note.updated_at or "-",
        )

    console.print(table)


def _add_tree_nodes(branch: Tree, node: FolderNode) -> None:
    for child in node.children:
        _add_tree_nodes(branch.add(f"[bold blue]{escape(child.name)}/[/bold blue]"), child)
    for note in sort_notes(node.notes, key="title", descending=False):
        branch.add(f"{escape(note.title)} [dim]({escape(Path(note.relative_path).name)})[/dim]")


@app.command()
def tree(
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Show the folder tree with the notes in each folder."""
    config, paths = _open_root(root)
    session = NoteSession(config)

    async def load() -> FolderNode:
        notes = await session.scan_notes(paths.root)
        return await session.build_folder_tree(paths.root, notes)

    root_node = asyncio.run(load())
    view = Tree(f"[bold]{escape(root_node.name)}[/bold]")
    _add_tree_nodes(view, root_node)
    console.print(view)


@app.command()
def show(
    note: str = typer.Argument(..., help="Note path, relative to the root or absolute"),
    raw: bool = typer.Option(False, "--raw", help="Print the file as stored, front matter included"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Print a note."""
    config, paths = _open_root(root)
    note_path = _resolve_note(paths, note)

    content = asyncio.run(NoteSession(config).get_note_content(note_path))
    if content is None:
        console.print(f"[red]Error: Could not read {escape(str(note_path))}[/red]")
        raise typer.Exit(code=1)

    if raw:
        console.print(content.raw_content, markup=False, highlight=False)
        return

    console.print(f"[bold cyan]{escape(content.meta.title)}[/bold cyan]")
    if content.meta.tags:
        console.print(f"[dim]Tags:[/dim] {escape(', '.join(content.meta.tags))}")
    if content.meta.updated_at:
        console.print(f"[dim]Updated:[/dim] {content.meta.updated_at}")
    console.print()
    console.print(content.content, markup=False, highlight=False)


@app.command()
def new(
    title: str = typer.Argument(..., help="Title of the new note"),
    folder: str = typer.Option("", "--folder", "-f", help="Folder relative to the root"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Create a new note from a title."""
    config, paths = _open_root(root)

    note_path = asyncio.run(NoteSession(config).create_note(paths.root, folder, title))
    if note_path is None:
        console.print(f"[red]Error: Could not create note {escape(title)!r}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]+[/green] Created note: {escape(_display(paths, note_path))}")


@app.command()
def mkdir(
    folder: str = typer.Argument(..., help="Folder relative to the root"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Create a folder (and any missing parents)."""
    config, paths = _open_root(root)

    if not asyncio.run(NoteSession(config).create_folder(paths.root, folder)):
        console.print(f"[red]Error: Could not create folder {escape(folder)}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]+[/green] Created folder: {escape(folder)}")


@app.command()
def rename(
    note: str = typer.Argument(..., help="Note path, relative to the root or absolute"),
    title: str = typer.Argument(..., help="New title"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Change a note's title and rename its file to match."""
    config, paths = _open_root(root)
    note_path = _resolve_note(paths, note)

    new_path = asyncio.run(NoteSession(config).rename_note(note_path, title))
    if new_path is None:
        console.print(f"[red]Error: Could not rename {escape(str(note_path))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Renamed[/green] {escape(_display(paths, note_path))} -> {escape(_display(paths, new_path))}")


@app.command()
def mv(
    note: str = typer.Argument(..., help="Note path, relative to the root or absolute"),
    folder: str = typer.Argument(..., help="Target folder relative to the root ('' for the root)"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Move a note into another folder."""
    config, paths = _open_root(root)
    note_path = _resolve_note(paths, note)

    new_path = asyncio.run(NoteSession(config).move_note(paths.root, note_path, folder))
    if new_path is None:
        console.print(f"[red]Error: Could not move {escape(str(note_path))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Moved[/green] to {escape(_display(paths, new_path))}")


@app.command()
def rm(
    note: str = typer.Argument(..., help="Note path, relative to the root or absolute"),
    with_images: bool = typer.Option(
        False,
        "--with-images",
        help="Also delete the note's images that no other note references",
    ),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Delete a note."""
    config, paths = _open_root(root)
    note_path = _resolve_note(paths, note)

    deleted = asyncio.run(
        NoteSession(config).delete_note(note_path, root=paths.root, with_images=with_images)
    )
    if not deleted:
        console.print(f"[red]Error: Could not delete {escape(str(note_path))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]-[/green] Deleted note: {escape(_display(paths, note_path))}")


@app.command()
def rmdir(
    folder: str = typer.Argument(..., help="Folder relative to the root"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Delete a folder and everything inside it."""
    config, paths = _open_root(root)

    if not yes and not typer.confirm(f"Delete {folder} and all of its notes?"):
        console.print("[dim]Cancelled[/dim]")
        raise typer.Exit(code=1)

    if not asyncio.run(NoteSession(config).delete_folder(paths.root, folder)):
        console.print(f"[red]Error: Could not delete folder {escape(folder)}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]-[/green] Deleted folder: {escape(folder)}")


@app.command()
def tags(
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """List every tag with the number of notes that carry it."""
    config, paths = _open_root(root)
    notes = asyncio.run(NoteSession(config).scan_notes(paths.root))

    tag_counts = collect_tags(notes)
    if not tag_counts:
        console.print("[dim]No tags found[/dim]")
        return

    table = Table(title="Tags")
    table.add_column("Tag", style="magenta")
    table.add_column("Notes", justify="right")
    for tag_name, count in tag_counts:
        table.add_row(escape(tag_name), str(count))
    console.print(table)


image_app = typer.Typer(help="Image attachment commands")
app.add_typer(image_app, name="image")


@image_app.command("add")
def image_add(
    note: str = typer.Argument(..., help="Note the image belongs to"),
    source: Path = typer.Argument(..., help="Image file to copy into the images directory"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Copy an image into the images directory under a name owned by NOTE."""
    config, paths = _open_root(root)
    note_path = _resolve_note(paths, note)

    result = asyncio.run(
        NoteSession(config).images_save_from_file(paths.root, note_base_name(note_path), source)
    )
    if not result.success:
        console.print(f"[red]Error: {escape(result.error or 'Could not save image')}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]+[/green] Saved image: {escape(result.relative_path)}")
    console.print(escape(f"![]({result.relative_path})"), highlight=False)


@image_app.command("clean")
def image_clean(
    note: str = typer.Argument(..., help="Note whose images are checked"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Delete NOTE's images that no note references any more."""
    config, paths = _open_root(root)
    note_path = _resolve_note(paths, note)

    session = NoteSession(config)
    content = asyncio.run(session.get_note_content(note_path))
    if content is None:
        console.print(f"[red]Error: Could not read {escape(str(note_path))}[/red]")
        raise typer.Exit(code=1)

    result = asyncio.run(
        session.images_cleanup_unused(paths.root, note_base_name(note_path), content.raw_content)
    )
    _print_cleanup(result, "No unused images")


@image_app.command("sweep")
def image_sweep(
    root: Optional[str] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
):
    """Delete every image that no note under the root references."""
    _, paths = _open_root(root)

    result = images.cleanup_all_unused_images(paths.root)
    _print_cleanup(result, "No unused images")


@app.command()
def version():
    """Show Marknote version."""
    from . import __version__
    console.print(f"Marknote v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
