"""
wascap CLI — sign WebAssembly modules and inspect/verify their claims.

Usage:
    wascap keygen account.seed
    wascap sign in.wasm out.wasm --issuer-key account.seed --msg -t demo -x 30
    wascap inspect out.wasm
    wascap verify out.wasm --issuer <base64 public key>
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wascap import caps as wellknown
from wascap.caps import capability_name
from wascap.claims import extract_claims, sign_buffer_with_claims
from wascap.crypto import KeyPair, generate_keypair, keypair_from_seed_b64, seed_b64
from wascap.errors import InvalidModuleHash, WascapError
from wascap.schema import Token
from wascap.timestamps import SystemClock, format_epoch
from wascap.tokens import validate_token


console = Console()

_CAP_FLAGS = {
    "msg": wellknown.MESSAGING,
    "keyvalue": wellknown.KEY_VALUE,
    "http_server": wellknown.HTTP_SERVER,
    "http_client": wellknown.HTTP_CLIENT,
    "blob": wellknown.BLOB,
    "events": wellknown.EVENTSTREAMS,
    "extras": wellknown.EXTRAS,
    "logging": wellknown.LOGGING,
}


def _load_key(path: Optional[str], role: str) -> KeyPair:
    """Load a base64 seed file, or generate a fresh key pair when no path is given."""
    if path is None:
        kp = generate_keypair()
        console.print(f"  [yellow]No {role} key given, generated one:[/yellow] {kp.encoded_public_key}")
        return kp
    try:
        return keypair_from_seed_b64(Path(path).read_text())
    except ValueError as e:
        raise click.ClickException(f"Invalid {role} key file {path}: {e}")


def _extract(module_file: str) -> Optional[Token]:
    data = Path(module_file).read_bytes()
    try:
        return extract_claims(data)
    except InvalidModuleHash as e:
        console.print("[red]✗ TAMPERED: module content does not match its signed hash[/red]")
        console.print(f"  declared: {e.expected}")
        console.print(f"  actual:   {e.actual}")
        sys.exit(1)
    except WascapError as e:
        raise click.ClickException(str(e))


def _claims_table(token: Token) -> Table:
    clock = SystemClock()
    claims = token.claims
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("Issuer", claims.issuer)
    table.add_row("Subject", claims.subject)
    table.add_row("ID", claims.id)
    table.add_row("Issued", format_epoch(claims.issued_at, clock))
    table.add_row("Not before", "immediately" if claims.not_before is None else format_epoch(claims.not_before, clock))
    table.add_row("Expires", "never" if claims.expires is None else format_epoch(claims.expires, clock))
    table.add_row("Module hash", claims.module_hash)
    table.add_row("Capabilities", "\n".join(capability_name(c) for c in claims.caps or []) or "-")
    table.add_row("Tags", ", ".join(claims.tags or []) or "-")
    return table


@click.group()
def main():
    """wascap — signed capability claims for WebAssembly modules."""
    pass


@main.command()
@click.argument("seed_file", type=click.Path(dir_okay=False))
def keygen(seed_file: str):
    """Generate an Ed25519 key pair and write its base64 seed to SEED_FILE."""
    kp = generate_keypair()
    Path(seed_file).write_text(seed_b64(kp) + "\n")
    console.print(f"Public key: {kp.encoded_public_key}")
    console.print(f"Key ID:     {kp.kid}")


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--issuer-key", "-i", type=click.Path(exists=True), help="Account (issuer) seed file")
@click.option("--subject-key", "-s", type=click.Path(exists=True), help="Module (subject) seed file")
@click.option("--cap", "-c", "custom_caps", multiple=True, help="Custom capability (repeatable)")
@click.option("--msg", is_flag=True, help="Enable the messaging capability")
@click.option("--keyvalue", is_flag=True, help="Enable the key/value store capability")
@click.option("--http-server", is_flag=True, help="Enable the HTTP server capability")
@click.option("--http-client", is_flag=True, help="Enable the HTTP client capability")
@click.option("--blob", is_flag=True, help="Enable the blob store capability")
@click.option("--events", is_flag=True, help="Enable the event streams capability")
@click.option("--extras", is_flag=True, help="Enable the extras capability")
@click.option("--logging", is_flag=True, help="Enable the logging capability")
@click.option("--tag", "-t", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--expires", "-x", type=click.IntRange(min=0), default=None, help="Expires in N days")
@click.option("--nbf", "-b", type=click.IntRange(min=0), default=None, help="Not valid for N days")
def sign(source: str, output: str, issuer_key: Optional[str], subject_key: Optional[str],
         custom_caps: tuple[str, ...], tags: tuple[str, ...], expires: Optional[int],
         nbf: Optional[int], **flags: bool):
    """Sign SOURCE with a claims token and write the result to OUTPUT."""
    console.print(Panel("wascap Module Signing", style="bold blue"))

    acct_kp = _load_key(issuer_key, "issuer")
    mod_kp = _load_key(subject_key, "subject")

    caps = [cap for flag, cap in _CAP_FLAGS.items() if flags.get(flag)]
    caps.extend(c for c in custom_caps if c not in caps)

    try:
        signed = sign_buffer_with_claims(
            Path(source).read_bytes(),
            mod_kp,
            acct_kp,
            expires_in_days=expires,
            not_before_days=nbf,
            caps=caps,
            tags=list(tags),
        )
    except WascapError as e:
        raise click.ClickException(str(e))

    Path(output).write_bytes(signed)
    console.print(f"  [green]✓ Signed module written to {output}[/green] ({len(signed)} bytes)")
    console.print(f"  Issuer:  {acct_kp.encoded_public_key}")
    console.print(f"  Subject: {mod_kp.encoded_public_key}")


@main.command()
@click.argument("module_file", type=click.Path(exists=True, dir_okay=False))
def inspect(module_file: str):
    """Show the claims embedded in MODULE_FILE."""
    token = _extract(module_file)
    if token is None:
        console.print("[yellow]No claims token embedded in this module.[/yellow]")
        sys.exit(1)

    console.print(Panel("wascap Module Claims", style="bold cyan"))
    console.print(_claims_table(token))

    validation = validate_token(token.jwt)
    if validation.expired:
        console.print("\n  [red]Token has EXPIRED[/red]")
    if validation.cannot_use_yet:
        console.print("\n  [yellow]Token is not valid yet[/yellow]")


@main.command()
@click.argument("module_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--issuer", "-k", default=None, help="Require this base64 issuer public key")
def verify(module_file: str, issuer: Optional[str]):
    """Verify MODULE_FILE: token present, hash intact, signature and dates valid."""
    console.print(Panel("wascap Module Verification", style="bold blue"))

    # 1. Extraction checks the signature against the issuer, then the module hash
    console.print("\n[bold]1. Signature and Module Hash[/bold]")
    token = _extract(module_file)
    if token is None:
        console.print("  [red]✗ Module carries no claims token[/red]")
        sys.exit(1)
    console.print("  [green]✓ Ed25519 signature is VALID[/green]")
    console.print("  [green]✓ Module hash matches signed claims[/green]")

    # 2. Validity window
    console.print("\n[bold]2. Validity Window[/bold]")
    validation = validate_token(token.jwt)
    ok = validation.usable
    if not validation.expired and not validation.cannot_use_yet:
        console.print(f"  [green]✓ Usable now, expires {validation.expires_human}[/green]")
    if validation.expired:
        console.print(f"  [red]✗ Expired {validation.expires_human}[/red]")
    if validation.cannot_use_yet:
        console.print(f"  [red]✗ Not valid before {validation.not_before_human}[/red]")

    # 3. Issuer pinning
    if issuer is not None:
        console.print("\n[bold]3. Issuer[/bold]")
        if token.claims.issuer == issuer:
            console.print("  [green]✓ Issuer matches[/green]")
        else:
            console.print(f"  [red]✗ Issuer {token.claims.issuer} is not the expected issuer[/red]")
            ok = False

    if ok:
        console.print("\n[bold green]✓ MODULE VERIFIED SUCCESSFULLY[/bold green]")
    else:
        console.print("\n[bold red]✗ MODULE VERIFICATION FAILED[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
