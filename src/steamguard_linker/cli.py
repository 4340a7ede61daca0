"""Command line for linking and moving authenticators.

The session comes from the environment (STEAMGUARD_STEAM_ID,
STEAMGUARD_ACCESS_TOKEN, STEAMGUARD_SESSION_ID, ...); logging in is not
handled here.
"""

from __future__ import annotations

from typing import Optional

import typer
from loguru import logger

from .config import LinkerConfig, get_config_manager, setup_logging
from .credential import CredentialStore
from .enroll import AuthenticatorLinker, FinalizeResult, LinkResult, SteamGuardAccount
from .errors import ConfigurationError
from .timesync import TimeAligner
from .transport import SteamWebClient

app = typer.Typer(no_args_is_help=True, help="Link a Steam mobile authenticator to this device.")


def _load_config() -> LinkerConfig:
    config = get_config_manager().load_config()
    setup_logging(config.logging)
    return config


def _build_linker(config: LinkerConfig) -> AuthenticatorLinker:
    try:
        session = config.session_data()
    except ConfigurationError as e:
        typer.echo(f"Missing session settings: {e}", err=True)
        raise typer.Exit(code=2)

    client = SteamWebClient(session, config.transport)
    aligner = TimeAligner(time_query=client.query_server_time)
    return AuthenticatorLinker(session, client=client, time_aligner=aligner, protocol=config.protocol)


def _save(store: CredentialStore, account: SteamGuardAccount, linker: AuthenticatorLinker) -> bool:
    return store.store_account(account, account_name=str(linker.session.steam_id))


@app.command()
def link(
    phone: Optional[str] = typer.Option(None, "--phone", help="Phone number to add, if the account has none."),
) -> None:
    """Add a new authenticator to the account."""
    config = _load_config()
    linker = _build_linker(config)
    store = CredentialStore(config.credentials_dir)
    linker.phone_number = phone

    result = linker.add_authenticator()
    if result == LinkResult.MUST_CONFIRM_EMAIL:
        typer.prompt("Click the link in the confirmation email, then press Enter", default="", show_default=False)
        result = linker.add_authenticator()

    if result != LinkResult.AWAITING_FINALIZATION or linker.linked_account is None:
        typer.echo(f"Failed to add authenticator: {result.value}", err=True)
        raise typer.Exit(code=1)

    # Persist before finalizing: the revocation code is the only way back
    if not _save(store, linker.linked_account, linker):
        typer.echo("Could not save the account file; the authenticator will not be finalized.", err=True)
        raise typer.Exit(code=1)

    sms_code = typer.prompt("SMS code")
    final = linker.finalize_add_authenticator(sms_code.strip())
    if final != FinalizeResult.SUCCESS or linker.linked_account is None:
        typer.echo(f"Unable to finalize authenticator: {final.value}", err=True)
        raise typer.Exit(code=1)

    _save(store, linker.linked_account, linker)
    typer.echo(f"Authenticator linked. Revocation code: {linker.linked_account.revocation_code}")


@app.command()
def move() -> None:
    """Move the account's existing authenticator to this device."""
    config = _load_config()
    linker = _build_linker(config)
    store = CredentialStore(config.credentials_dir)

    result = linker.move_authenticator()
    if result != LinkResult.AWAITING_FINALIZATION:
        typer.echo(f"Failed to start authenticator move: {result.value}", err=True)
        raise typer.Exit(code=1)

    sms_code = typer.prompt("SMS code")
    final = linker.finalize_move_authenticator(sms_code.strip())
    if final != FinalizeResult.SUCCESS or linker.linked_account is None:
        typer.echo(f"Unable to move authenticator: {final.value}", err=True)
        raise typer.Exit(code=1)

    if not _save(store, linker.linked_account, linker):
        logger.error("Authenticator moved but the account file could not be written")
        raise typer.Exit(code=1)
    typer.echo("Authenticator moved to this device.")


@app.command("time")
def show_time() -> None:
    """Print the Steam server time and the local clock offset."""
    config = _load_config()
    aligner = TimeAligner(time_query=SteamWebClient(config=config.transport).query_server_time)
    steam_time = aligner.get_steam_time()
    snapshot = aligner.snapshot()
    status = "aligned" if snapshot.aligned else "not aligned, local clock"
    typer.echo(f"{steam_time} (offset {snapshot.offset:+d}s, {status})")


def run() -> None:
    app()
