"""Aura Vault CLI - zero-knowledge secret vault."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..utils.logging import setup_logging
from ..vault import (
    JsonRecordStore,
    UnlockFailed,
    VaultError,
    VaultSession,
    get_vault_config,
    verify_vault_integrity,
)

app = typer.Typer(
    name="aura-vault",
    help="Client-side encrypted vault for small secrets.",
    no_args_is_help=True,
)

console = Console()

RECORDS_FILE_HELP = "Vault file (default: $VAULT_RECORDS_FILE or ~/.aura-vault/vault.json)"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Aura Vault command line."""
    config = get_vault_config()
    setup_logging("DEBUG" if verbose else config.log_level)


def _open_session(records_file: Optional[Path]) -> VaultSession:
    config = get_vault_config()
    return VaultSession(JsonRecordStore(records_file or config.records_file), config=config)


def _unlock(session: VaultSession, passphrase: str) -> None:
    try:
        session.unlock(passphrase)
    except UnlockFailed as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def add(
    title: str = typer.Argument(..., help="Plaintext label for the secret"),
    content: str = typer.Option(
        ..., "--content", "-c", prompt=True, hide_input=True,
        help="Secret content",
    ),
    passphrase: str = typer.Option(
        ..., "--passphrase", "-p", prompt=True, hide_input=True,
        help="Vault passphrase",
    ),
    records_file: Optional[Path] = typer.Option(None, "--records-file", "-f", help=RECORDS_FILE_HELP),
):
    """
    Encrypt and store a new secret.

    An empty vault accepts any passphrase; the first secret fixes it.
    """
    with _open_session(records_file) as session:
        _unlock(session, passphrase)
        try:
            item = session.add_secret(title, content)
        except (VaultError, OSError) as e:
            console.print(f"[red]Error: Failed to encrypt and add new item: {e}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]Added:[/green] {escape(item.title)} ({item.id})")


@app.command(name="list")
def list_secrets(
    passphrase: str = typer.Option(
        ..., "--passphrase", "-p", prompt=True, hide_input=True,
        help="Vault passphrase",
    ),
    reveal: bool = typer.Option(False, "--reveal", help="Show secret contents"),
    records_file: Optional[Path] = typer.Option(None, "--records-file", "-f", help=RECORDS_FILE_HELP),
):
    """Unlock the vault and list its secrets."""
    with _open_session(records_file) as session:
        _unlock(session, passphrase)
        items = session.decrypted_records

    if not items:
        console.print("[yellow]Vault is empty.[/yellow]")
        return

    table = Table(title=f"Vault ({len(items)} secrets)")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Content")

    for item in items:
        table.add_row(item.id, escape(item.title), escape(item.content) if reveal else "••••••")

    console.print(table)


@app.command(name="change-passphrase")
def change_passphrase(
    old_passphrase: str = typer.Option(
        ..., "--old-passphrase", prompt=True, hide_input=True,
        help="Current passphrase",
    ),
    new_passphrase: str = typer.Option(
        ..., "--new-passphrase", prompt=True, hide_input=True, confirmation_prompt=True,
        help="New passphrase",
    ),
    records_file: Optional[Path] = typer.Option(None, "--records-file", "-f", help=RECORDS_FILE_HELP),
):
    """Re-encrypt every secret under a new passphrase."""
    with _open_session(records_file) as session:
        if not session.rotate_passphrase(old_passphrase, new_passphrase):
            console.print(f"[red]Error: {session.last_error}[/red]")
            raise typer.Exit(1)
        count = session.record_count

    console.print(f"[green]Passphrase changed.[/green] Re-encrypted {count} secrets.")


@app.command()
def verify(
    passphrase: str = typer.Option(
        ..., "--passphrase", "-p", prompt=True, hide_input=True,
        help="Vault passphrase",
    ),
    records_file: Optional[Path] = typer.Option(None, "--records-file", "-f", help=RECORDS_FILE_HELP),
):
    """
    Check that every secret decrypts, without changing the vault.

    Secrets still on the legacy salt are reported; the next unlock
    migrates them.
    """
    config = get_vault_config()
    store = JsonRecordStore(records_file or config.records_file)

    try:
        stats = verify_vault_integrity(store, passphrase, config)
    except (VaultError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"Records: {stats['records_total']}")
    console.print(f"Verified: {stats['records_verified']}")
    if stats["records_legacy"]:
        console.print(f"[yellow]Legacy salt: {stats['records_legacy']} (migrated on next unlock)[/yellow]")
    if stats["records_failed"]:
        console.print(f"[red]Failed: {stats['records_failed']}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
