"""Open Season CLI - local-first evidence vault."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..vault.exceptions import VaultError

app = typer.Typer(
    name="open-season",
    help="Local-first evidence vault for investigators.",
    no_args_is_help=True,
)

console = Console()

PASSWORD_OPTION = typer.Option(
    None,
    "--password", "-p",
    envvar="OPEN_SEASON_PASSWORD",
    help="Vault password (prompted for if omitted)",
)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report vault and input errors and exit with status 1."""
    try:
        yield
    except (VaultError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@contextmanager
def _unlocked(password: Optional[str]):
    """Unlock the vault for the duration of one command."""
    from ..hunts import HuntManager
    from ..vault import VaultManager

    if password is None:
        password = typer.prompt("Vault password", hide_input=True)

    vm = VaultManager()
    vm.unlock(password)
    try:
        yield HuntManager(config=vm.config, store=vm.store)
    finally:
        vm.lock()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Local-first evidence vault for investigators."""
    from dotenv import load_dotenv

    from ..config.settings import get_settings
    from ..utils.logging import setup_logging

    load_dotenv()
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
    )


@app.command()
def salt():
    """
    Show the installation salt, creating it if needed.
    """
    from ..vault import VaultManager

    with _handle_errors():
        vm = VaultManager()
        value = vm.get_salt()

    console.print(f"Salt file: {vm.salt_path}")
    console.print(f"Salt: {value}")


@app.command()
def create(
    name: str = typer.Argument(..., help="Display name for the hunt"),
    password: Optional[str] = PASSWORD_OPTION,
):
    """
    Create a new hunt.
    """
    with _handle_errors(), _unlocked(password) as hunts:
        hunt_id = hunts.create_hunt(name)

    console.print(f"[green]Created hunt: {hunt_id}[/green]")


@app.command("list")
def list_hunts():
    """
    List all hunts.
    """
    from ..hunts import HuntManager

    with _handle_errors():
        hunts = HuntManager().list_hunts()

    if not hunts:
        console.print("No hunts found.")
        return

    table = Table(title=f"Hunts ({len(hunts)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Created")
    table.add_column("Evidence", justify="right")

    for hunt in hunts:
        table.add_row(hunt.id, hunt.name, hunt.created_at, str(hunt.evidence_count))

    console.print(table)


@app.command()
def add(
    hunt_id: str = typer.Argument(..., help="Hunt ID"),
    file: Path = typer.Argument(..., help="File to encrypt into the hunt"),
    description: Optional[str] = typer.Option(
        None,
        "--description", "-d",
        help="Description (default: file name)",
    ),
    password: Optional[str] = PASSWORD_OPTION,
):
    """
    Encrypt a file into a hunt.
    """
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    with _handle_errors(), _unlocked(password) as hunts:
        record = hunts.add_evidence_file(hunt_id, file, description)

    console.print(f"[green]Added evidence {record.id}:[/green] {record.file_path}")


@app.command()
def evidence(
    hunt_id: str = typer.Argument(..., help="Hunt ID"),
):
    """
    List the evidence recorded in a hunt's ledger.
    """
    from ..hunts import HuntManager

    with _handle_errors():
        manager = HuntManager()
        hunt = manager.get_hunt(hunt_id)
        records = manager.list_evidence(hunt_id)

    console.print(f"\n[bold]Hunt: {hunt.name}[/bold] ({hunt.status})")

    if not records:
        console.print("No evidence recorded.")
        return

    table = Table(title=f"Evidence ({len(records)})")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Description")
    table.add_column("File")
    table.add_column("Added")

    for record in records:
        table.add_row(str(record.id), record.description, record.file_path, record.created_at)

    console.print(table)


@app.command()
def extract(
    hunt_id: str = typer.Argument(..., help="Hunt ID"),
    evidence_id: int = typer.Argument(..., help="Evidence ID"),
    output: Path = typer.Option(..., "--output", "-o", help="Where to write the plaintext"),
    password: Optional[str] = PASSWORD_OPTION,
):
    """
    Decrypt one evidence item to a file.
    """
    with _handle_errors(), _unlocked(password) as hunts:
        data = hunts.read_evidence(hunt_id, evidence_id)

    try:
        output.write_bytes(data)
    except OSError as e:
        console.print(f"[red]Error: Failed to write {output}: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Decrypted {len(data)} bytes to {output}[/green]")


@app.command()
def rename(
    hunt_id: str = typer.Argument(..., help="Hunt ID"),
    name: str = typer.Argument(..., help="New display name"),
):
    """
    Rename a hunt.
    """
    from ..hunts import HuntManager

    with _handle_errors():
        HuntManager().rename_hunt(hunt_id, name)

    console.print(f"[green]Renamed {hunt_id} to {name}[/green]")


@app.command()
def export(
    hunt_id: str = typer.Argument(..., help="Hunt ID"),
    output: Optional[Path] = typer.Argument(
        None,
        help="Bundle to write (default: <hunt_id>.osb in the current directory)",
    ),
):
    """
    Export a hunt as a portable bundle.
    """
    from ..hunts import HuntManager

    with _handle_errors():
        manager = HuntManager()
        if output is None:
            output = Path.cwd() / f"{hunt_id}{manager.config.bundle_extension}"
        count = manager.export_hunt(hunt_id, output)

    console.print(f"[green]Exported {count} entries to {output}[/green]")


@app.command("import")
def import_bundle(
    archive: Path = typer.Argument(..., help="Bundle to import"),
):
    """
    Import a bundle as a new hunt named after the file.
    """
    from ..hunts import HuntManager

    if not archive.exists():
        console.print(f"[red]Error: File not found: {archive}[/red]")
        raise typer.Exit(1)

    with _handle_errors():
        result = HuntManager().import_hunt(archive, show_progress=True)

    console.print(f"[green]Imported hunt: {result.case_id}[/green]")
    console.print(f"  Files: {result.files_written}")
    if result.skipped:
        console.print(f"  [yellow]Skipped unsafe entries: {result.skipped_count}[/yellow]")
        for name in result.skipped:
            console.print(f"    {name}")


@app.command()
def lookup(
    targets: list[str] = typer.Argument(..., help="Names to search federal awards for"),
):
    """
    Look up federal contract awards for one or more names.
    """
    from ..lookup import AwardLookupClient

    with AwardLookupClient() as client:
        result = client.check_targets(targets)

    for name, message in result.failures.items():
        console.print(f"[yellow]Lookup failed for {name}: {message}[/yellow]")

    if result.all_failed:
        console.print("[red]Error: all lookups failed[/red]")
        raise typer.Exit(1)

    if not result.awards:
        console.print("No awards found.")
        return

    table = Table(title=f"Awards ({len(result.awards)})")
    table.add_column("Recipient", style="cyan")
    table.add_column("Agency")
    table.add_column("Amount", justify="right")
    table.add_column("Signed")

    for award in result.awards:
        table.add_row(
            award.recipient_name,
            award.awarding_agency,
            f"${award.total_obligation:,.2f}",
            award.date_signed,
        )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from .. import __version__

    console.print(f"Open Season v{__version__}")
    console.print("Local-first evidence vault")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
