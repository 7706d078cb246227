"""CLI commands for the spaced repetition explorer."""

import logging
import re
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.prompt import Prompt
from rich.rule import Rule
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .config import load_explorer_settings, load_sr_settings, save_explorer_settings
from .decks import DeckNode
from .scanner import ScanProgress, ScanResult, scan_vault
from .study import ReviewSession, SortMode, sort_cards

console = Console()

SR_COMMENT_RE = re.compile(r"<!--SR:.*?-->")

VAULT_ARG = click.Path(exists=True, file_okay=False, path_type=Path)
SORT_CHOICE = click.Choice([m.value for m in SortMode])


def load_vault(vault: Path) -> ScanResult:
    """Scan a vault with a progress bar."""
    sr_settings = load_sr_settings(vault)
    explorer_settings = load_explorer_settings(vault)

    with Progress(
        SpinnerColumn(),
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning notes...", total=None)

        def on_progress(event: ScanProgress) -> None:
            progress.update(
                task,
                total=event.total,
                completed=event.completed,
                description=f"Scanning: {event.current_note[:30]}",
            )

        return scan_vault(vault, sr_settings, explorer_settings, progress_callback=on_progress)


def get_deck(result: ScanResult, deck_path: str) -> DeckNode:
    """Look up a deck by path, exiting if it does not exist."""
    node = result.deck_tree.find(deck_path)
    if node is None or node.is_root:
        console.print(f"[red]✗ Unknown deck '{escape(deck_path)}'.[/red]")
        console.print("[dim]Run 'srx decks VAULT' to see available decks.[/dim]")
        sys.exit(1)
    return node


def _visible(text: str) -> str:
    """Card text without scheduling comments."""
    return SR_COMMENT_RE.sub("", text).strip()


def _preview(text: str, width: int = 40) -> str:
    text = _visible(text).replace("\n", " ")
    text = text[:width] + "..." if len(text) > width else text
    return escape(text)


def _add_deck_branches(branch: Tree, node: DeckNode) -> None:
    for child in node.children:
        sub = branch.add(f"[cyan]{escape(child.name)}[/cyan] [dim]({child.total_count()})[/dim]")
        _add_deck_branches(sub, child)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool) -> None:
    """Spaced Repetition Explorer - browse flashcards stored in markdown notes.

    Reads cards written in the spaced-repetition plugin's syntax from an
    Obsidian vault. Nothing in the vault is modified.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@cli.command()
@click.argument("vault", type=VAULT_ARG)
def scan(vault: Path) -> None:
    """Scan a vault and summarize what was found."""
    result = load_vault(vault)
    console.print(f"[green]✓ Found {len(result.cards)} card(s) in {len(result.decks)} deck(s)[/green]")
    for deck in result.decks:
        console.print(f"  [dim]•[/dim] {escape(deck)}")


@cli.command()
@click.argument("vault", type=VAULT_ARG)
def decks(vault: Path) -> None:
    """Show the deck hierarchy with card counts."""
    result = load_vault(vault)
    if not result.deck_tree.children:
        console.print("[yellow]No decks found[/yellow]")
        return

    tree = Tree(f"[bold]Decks[/bold] [dim]({len(result.cards)} cards)[/dim]")
    _add_deck_branches(tree, result.deck_tree)
    console.print(tree)


@cli.command()
@click.argument("vault", type=VAULT_ARG)
@click.option("-d", "--deck", "deck_path", help="Only show cards under this deck")
@click.option("-s", "--sort", "sort_mode", type=SORT_CHOICE, default="ease", help="Sort order")
@click.option("-l", "--limit", default=50, help="Maximum cards to show")
def cards(vault: Path, deck_path: str | None, sort_mode: str, limit: int) -> None:
    """List cards in a vault or deck."""
    result = load_vault(vault)
    card_list = get_deck(result, deck_path).all_cards() if deck_path else result.cards
    card_list = sort_cards(card_list, sort_mode)

    if not card_list:
        console.print("[yellow]No cards found[/yellow]")
        return

    table = Table(title=f"Cards: {escape(deck_path)}" if deck_path else "Cards")
    table.add_column("Front", style="cyan", max_width=40)
    table.add_column("Back", style="green", max_width=40)
    table.add_column("Ease", justify="right")
    table.add_column("Due", style="dim")
    table.add_column("Location", style="dim")

    for card in card_list[:limit]:
        table.add_row(
            _preview(card.front),
            _preview(card.back),
            str(card.ease),
            card.due or "n/a",
            f"{card.file_path}:{card.line}",
        )

    console.print(table)
    console.print(f"\n[dim]Showing {min(limit, len(card_list))} of {len(card_list)} card(s)[/dim]")


@cli.command()
@click.argument("vault", type=VAULT_ARG)
@click.argument("deck_path")
@click.option("-s", "--sort", "sort_mode", type=SORT_CHOICE, default="ease", help="Sort order")
def review(vault: Path, deck_path: str, sort_mode: str) -> None:
    """Flip through the cards of a deck.

    Press Enter to show or hide the answer, n/p for next/previous, q to quit.
    """
    result = load_vault(vault)
    node = get_deck(result, deck_path)
    session = ReviewSession.for_cards(node.name, node.all_cards(), sort_mode)

    if not session.total:
        console.print("[yellow]No flashcards found for this deck.[/yellow]")
        return

    while True:
        card = session.current
        due_label = f"Due {card.due}" if card.due else "Due n/a"
        console.print(Rule(escape(f"{session.deck} {session.position}/{session.total}")))
        console.print(f"[dim]Ease {card.ease} · {due_label}[/dim]\n")
        console.print(escape(_visible(card.front)))
        if session.showing_back:
            console.print(Rule(style="dim"))
            console.print(f"[green]{escape(_visible(card.back))}[/green]")

        action = Prompt.ask("\n[dim]Enter=flip  n=next  p=prev  q=quit[/dim]", default="", show_default=False)
        action = action.strip().lower()
        if action == "q":
            break
        if action == "n":
            session.shift(1)
        elif action == "p":
            session.shift(-1)
        else:
            session.toggle()


@cli.command()
@click.argument("vault", type=VAULT_ARG)
@click.option("--use-ignore-folders/--no-use-ignore-folders", default=None,
              help="Apply the spaced-repetition plugin's ignored folders")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=None, help="Parallel note readers")
def settings(vault: Path, use_ignore_folders: bool | None, workers: int | None) -> None:
    """Show or change explorer settings for a vault."""
    explorer_settings = load_explorer_settings(vault)

    if use_ignore_folders is not None or workers is not None:
        if use_ignore_folders is not None:
            explorer_settings.use_sr_ignore_folders = use_ignore_folders
        if workers is not None:
            explorer_settings.max_workers = workers
        save_explorer_settings(vault, explorer_settings)
        console.print("[green]✓ Settings saved[/green]")

    sr_settings = load_sr_settings(vault)
    table = Table(title="Explorer Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Apply ignored folders", str(explorer_settings.use_sr_ignore_folders))
    table.add_row("Workers", str(explorer_settings.max_workers))
    table.add_row("Ignored folders", escape(", ".join(sr_settings.note_folders_to_ignore)) or "[dim]none[/dim]")
    table.add_row("Decks from", "folders" if sr_settings.convert_folders_to_decks else "tags")
    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    cli()
