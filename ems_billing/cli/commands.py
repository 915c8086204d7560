"""CLI commands for EMS Billing."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ems_billing.config import get_settings

app = typer.Typer(
    name="ems-billing",
    help="Clinic encounter billing and Ministry of Health reconciliation",
    add_completion=False,
)
console = Console()


def get_context():
    """Get initialized billing services."""
    from ems_billing.app import build_billing_context

    return build_billing_context(get_settings())


@app.command()
def version():
    """Show version information."""
    from ems_billing import __version__

    console.print(f"EMS Billing v{__version__}")


@app.command()
def codes():
    """List the billing code catalog."""
    ctx = get_context()

    table = Table(title=f"Billing Codes ({len(ctx.catalog)})")
    table.add_column("Code")
    table.add_column("Effective")
    table.add_column("Fee", justify="right")
    for entry in ctx.catalog:
        table.add_row(entry.code, entry.date_initialized.isoformat(), f"{entry.cost:.2f}")
    console.print(table)


@app.command("import-codes")
def import_codes(
    master_file: Path = typer.Argument(..., help="Schedule of benefits from the Ministry"),
):
    """Replace the billing code table with the Ministry's schedule of benefits."""
    from ems_billing.billing import BillingCodeCatalog
    from ems_billing.billing.errors import CatalogLoadError

    if not master_file.exists():
        console.print(f"[red]Master file not found: {master_file}[/red]")
        raise typer.Exit(1)

    try:
        catalog = BillingCodeCatalog.from_master_file(master_file.read_text(encoding="utf-8").splitlines())
    except CatalogLoadError as e:
        console.print(f"[red]Invalid master file: {e}[/red]")
        raise typer.Exit(1)

    ctx = get_context()
    try:
        ctx.tables.set_table(ctx.settings.billing_codes_table, catalog.to_rows())
    except Exception as e:
        ctx.events.log_exception(e, "Billing", "UpdateBillingCodesFromFile", "FAILED SAVING BILLING CODES")
        console.print(f"[red]Failed to save billing codes: {e}[/red]")
        raise typer.Exit(1)
    ctx.events.log("Billing", "UpdateBillingCodesFromFile", f"Imported {len(catalog)} billing codes from {master_file}")
    console.print(f"[green]Imported {len(catalog)} billing codes[/green]")


@app.command()
def records(
    appointment_id: Optional[str] = typer.Option(None, "--appointment", "-a", help="Only this appointment"),
):
    """List appointment billing records."""
    ctx = get_context()
    rows = ctx.store.records_for_appointment(appointment_id) if appointment_id else ctx.store.records()

    table = Table(title=f"Appointment Billing Records ({len(rows)})")
    table.add_column("ID")
    table.add_column("Appointment")
    table.add_column("Patient")
    table.add_column("Code")
    for r in rows:
        table.add_row(r.billing_record_id, r.appointment_id, r.patient_id, r.billing_code)
    console.print(table)


@app.command("add-record")
def add_record(
    appointment_id: str = typer.Argument(..., help="Appointment ID"),
    patient_id: str = typer.Argument(..., help="Patient ID"),
    billing_code: str = typer.Argument(..., help="Billing code from the catalog"),
):
    """Bill a code against an appointment."""
    ctx = get_context()
    record_id = ctx.store.add_record(appointment_id, patient_id, billing_code)
    if record_id is None:
        console.print("[red]Failed to add billing record[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Added billing record {record_id}[/green]")


@app.command("update-record")
def update_record(
    record_id: str = typer.Argument(..., help="Appointment billing record ID"),
    appointment_id: str = typer.Argument(..., help="Appointment ID"),
    patient_id: str = typer.Argument(..., help="Patient ID"),
    billing_code: str = typer.Argument(..., help="Billing code from the catalog"),
):
    """Replace the fields of a billing record."""
    ctx = get_context()
    if not ctx.store.update_record(record_id, appointment_id, patient_id, billing_code):
        console.print(f"[red]Failed to update billing record {record_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Updated billing record {record_id}[/green]")


@app.command("remove-record")
def remove_record(
    record_id: str = typer.Argument(..., help="Appointment billing record ID"),
):
    """Delete a billing record."""
    ctx = get_context()
    if not ctx.store.remove_record(record_id):
        console.print(f"[red]Failed to remove billing record {record_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Removed billing record {record_id}[/green]")


@app.command()
def flag(
    appointment_id: str = typer.Argument(..., help="Appointment ID"),
    recall_flag: int = typer.Argument(..., help="Recall flag value (e.g. weeks until recall)"),
):
    """Flag an appointment for patient recall."""
    ctx = get_context()
    if not ctx.store.flag_appointment(ctx.scheduling, appointment_id, recall_flag):
        console.print(f"[red]Failed to flag appointment {appointment_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Appointment {appointment_id} flagged for recall ({recall_flag})[/green]")


@app.command()
def generate(
    year: int = typer.Argument(..., help="Billing year"),
    month: int = typer.Argument(..., min=1, max=12, help="Billing month (1-12)"),
):
    """Generate the monthly billing file for submission."""
    from ems_billing.billing import monthly_billing_filename

    ctx = get_context()
    if not ctx.generator.generate(year, month):
        console.print("[red]Failed to generate monthly billing file[/red]")
        raise typer.Exit(1)
    console.print(
        f"[green]Wrote {ctx.settings.output_dir / monthly_billing_filename(year, month)}[/green]"
    )


@app.command()
def reconcile(
    response_file: str = typer.Argument("govFile.txt", help="Response file from the Ministry"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Reconcile a Ministry response file and show the summary."""
    ctx = get_context()
    report = ctx.reconciliation.reconcile(response_file)
    if report is None:
        console.print(f"[red]Failed to reconcile {response_file}[/red]")
        raise typer.Exit(1)

    if output_json:
        console.print_json(report.model_dump_json())
    else:
        _display_lines(report.lines, title=f"Reconciliation: {response_file}")


@app.command()
def summary(
    month: str = typer.Argument(..., help="Billing period as YYYYMM"),
):
    """Show the monthly billing summary from the period's response file."""
    ctx = get_context()
    lines = ctx.reconciliation.generate_monthly_summary(month)
    if not lines:
        console.print(f"[red]No summary available for {month}[/red]")
        raise typer.Exit(1)
    _display_lines(lines, title=f"Monthly Billing Summary {month}")


@app.command()
def events(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of events"),
):
    """Show recent billing events."""
    ctx = get_context()
    recent = ctx.events.get_recent_events(limit=limit)
    if not recent:
        console.print("[yellow]No billing events logged yet.[/yellow]")
        return
    for event in recent:
        console.print_json(data=event)


def _display_lines(lines: list[str], title: str) -> None:
    """Display summary lines, follow-ups in their own table."""
    totals, follow_ups = lines[:6], lines[6:]
    console.print(Panel("\n".join(totals), title=title))
    if follow_ups:
        table = Table(title="Encounters to Follow Up")
        table.add_column("Encounter")
        for line in follow_ups:
            table.add_row(line)
        console.print(table)
