"""
MenuQR CLI.

Command-line interface for provisioning and maintenance:

    menuqr db-create
    menuqr seed-demo
    menuqr create-admin            (ADMIN_EMAIL, ADMIN_PASSWORD, ...)
    menuqr create-tenant blueprint.json
    menuqr regenerate-qr 12
    menuqr geo-lookup --ip 8.8.8.8
"""

import asyncio
import sys
import time
from pathlib import Path
from typing import Optional

import httpx
import pydantic
import typer
from rich.console import Console
from rich.table import Table

from rest_api.models import Base
from rest_api.seed import seed
from rest_api.services.domain import QRCodeService
from rest_api.services.provisioning import (
    PlatformAdminBlueprint,
    ProvisioningOrchestrator,
    ProvisioningResult,
    TenantBlueprint,
)
from shared.config.logging import cli_logger as logger, mask_email, setup_logging
from shared.config.settings import settings
from shared.infrastructure.db import engine, session_scope, unit_of_work
from shared.infrastructure.geo import CountryResolver
from shared.utils.exceptions import AppException, DependencyFailure

app = typer.Typer(
    name="menuqr",
    help="MenuQR catalog provisioning CLI",
    add_completion=False,
)
console = Console()


@app.callback()
def main():
    """Configure logging before any command runs."""
    setup_logging()


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(1)


def _print_result(result: ProvisioningResult, title: str) -> None:
    table = Table(title=title)
    table.add_column("Entidad", style="cyan")
    table.add_column("Creadas", style="green")
    for name, count in sorted(result.counts.items()):
        table.add_row(name, str(count))
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_create():
    """Create all tables (no migrations)."""
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created/verified[/green]")


@app.command()
def seed_demo():
    """Provision the demo tenant, restaurant and menu."""
    console.print("[blue]Seeding demo data...[/blue]")

    try:
        with session_scope() as db:
            result = seed(db)
    except AppException as e:
        _fail(f"Seed failed: {e.detail}")

    if result is None:
        console.print("[yellow]Demo data already present, skipping[/yellow]")
        return
    _print_result(result, "Demo seed")
    console.print("[green]✓ Seed complete[/green]")


# =============================================================================
# Provisioning Commands
# =============================================================================

@app.command()
def create_admin(
    email: Optional[str] = typer.Option(None, envvar="ADMIN_EMAIL", help="Admin email"),
    password: Optional[str] = typer.Option(None, envvar="ADMIN_PASSWORD", help="Admin password", show_default=False),
    first_name: str = typer.Option("Admin", envvar="ADMIN_FIRST_NAME"),
    last_name: str = typer.Option("Sistema", envvar="ADMIN_LAST_NAME"),
):
    """Create the platform SUPER_ADMIN from environment variables."""
    if not email or not password:
        _fail("ADMIN_EMAIL y ADMIN_PASSWORD son requeridos")
    if len(password) < settings.password_min_length:
        _fail(f"La contraseña debe tener al menos {settings.password_min_length} caracteres")

    try:
        blueprint = PlatformAdminBlueprint(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
    except pydantic.ValidationError:
        _fail(f"Email inválido: {email}")

    try:
        with session_scope() as db:
            user = ProvisioningOrchestrator(db).bootstrap_platform_admin(blueprint)
            user_id, user_email = user.id, user.email
    except AppException as e:
        _fail(str(e.detail))

    logger.info("Super admin created from CLI", user_id=user_id, email=mask_email(user_email))
    console.print("[green]✓ Super admin creado[/green]")
    console.print(f"  Email: {user_email}")
    console.print(f"  ID: {user_id}")


@app.command()
def create_tenant(
    blueprint_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Tenant blueprint (JSON)"),
):
    """Provision a tenant graph from a JSON blueprint. All or nothing."""
    try:
        blueprint = TenantBlueprint.model_validate_json(blueprint_path.read_text(encoding="utf-8"))
    except pydantic.ValidationError as e:
        _fail(f"Blueprint inválido:\n{e}")

    try:
        with session_scope() as db:
            result = ProvisioningOrchestrator(db).provision(blueprint)
    except AppException as e:
        _fail(f"Aprovisionamiento cancelado: {e.detail}")

    _print_result(result, f"Tenant {result.tenant_id}")
    console.print(f"[green]✓ Tenant '{blueprint.name}' creado (ID {result.tenant_id})[/green]")


@app.command()
def regenerate_qr(
    menu_id: int = typer.Argument(..., help="Menu ID"),
):
    """Regenerate the QR code of a menu from its current public URL."""
    failure: DependencyFailure | None = None
    try:
        with session_scope() as db:
            with unit_of_work(db):
                try:
                    url = QRCodeService(db).generate(menu_id).url
                except DependencyFailure as e:
                    # The stale code was deactivated; keep that
                    failure = e
    except AppException as e:
        _fail(str(e.detail))

    if failure is not None:
        console.print(f"[yellow]⚠ QR desactivado: {failure.detail}[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓ QR regenerado: {url}[/green]")


# =============================================================================
# Diagnostics
# =============================================================================

@app.command()
def geo_lookup(
    ip: Optional[str] = typer.Option(None, "--ip", help="Client IP address"),
    header: list[str] = typer.Option([], "--header", "-H", help="Request header, 'Name: value'"),
):
    """Resolve the country of a client the way registration does."""
    headers = {}
    for raw in header:
        name, sep, value = raw.partition(":")
        if not sep:
            _fail(f"Header inválido: {raw}")
        headers[name.strip()] = value.strip()

    country = asyncio.run(CountryResolver().resolve(ip, headers))
    console.print(country)


@app.command()
def health(
    url: str = typer.Option(
        f"http://localhost:{settings.rest_api_port}/api/health",
        help="REST API health URL",
    ),
):
    """Check REST API health."""

    async def _health():
        table = Table(title="Service Health")
        table.add_column("Service", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Response Time", style="yellow")

        async with httpx.AsyncClient(timeout=5.0) as client:
            start = time.time()
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                table.add_row("REST API", f"✗ {type(e).__name__}", "-")
            else:
                elapsed = (time.time() - start) * 1000
                if response.status_code == 200:
                    table.add_row("REST API", "✓ Healthy", f"{elapsed:.0f}ms")
                else:
                    table.add_row("REST API", f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")

        console.print(table)

    asyncio.run(_health())


@app.command()
def version():
    """Show version information."""
    table = Table(title="MenuQR Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("CLI", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
