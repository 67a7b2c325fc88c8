from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from data_access.config import ServiceConfig, get_settings, load_service_config
from data_access.domain.entities import EntityDescriptor, FieldType
from data_access.domain.errors import DataAccessError, UnknownTableError
from data_access.services.dynamodb import DynamoDbService
from data_access.utils.logging import configure_logging

app = typer.Typer(help="Data-access library CLI.")
console = Console()


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _coerce(descriptor: EntityDescriptor, field_name: str, raw: str) -> Any:
    """Convert a command-line string to the type of the field it targets."""
    spec = descriptor.fields.get(field_name)
    if spec is None:
        raise typer.BadParameter(f"unknown field {field_name!r}")
    if spec.type == FieldType.NUMBER:
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"{field_name} expects a number, got {raw!r}") from None
    if spec.type == FieldType.BOOLEAN:
        return raw.strip().lower() in ("1", "true", "yes")
    return raw


def _parse_where(descriptor: EntityDescriptor, clauses: List[str]) -> Dict[str, Any]:
    """Turn ``field=value`` clauses into equality criteria."""
    criteria: Dict[str, Any] = {}
    for clause in clauses:
        field_name, sep, raw = clause.partition("=")
        if not sep or not field_name:
            raise typer.BadParameter(f"expected field=value, got {clause!r}", param_hint="--where")
        criteria[field_name] = {"eq": _coerce(descriptor, field_name, raw)}
    return criteria


def _descriptor(config: ServiceConfig, table_name: str) -> EntityDescriptor:
    try:
        return config.entities[table_name]
    except KeyError:
        raise UnknownTableError(f"{table_name} is not a configured table") from None


@app.command()
def info() -> None:
    """
    Show effective settings values.
    """
    settings = get_settings()
    typer.echo(
        f"service={settings.service_name} version={settings.service_version} "
        f"application={settings.application_name} log_level={settings.log_level} "
        f"exporter={settings.exporter_url or '-'}"
    )


@app.command()
def tables(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Service configuration JSON file."),
) -> None:
    """
    List configured tables and their key schema.
    """
    config = load_service_config(config_path)
    table = Table(title="Configured tables")
    table.add_column("table")
    table.add_column("hash key")
    table.add_column("range key")
    table.add_column("billing")
    for name, descriptor in config.entities.items():
        table.add_row(
            name,
            descriptor.hash_key,
            descriptor.range_key or "-",
            descriptor.options.effective_billing_mode,
        )
    console.print(table)


@app.command("sync-tables")
def sync_tables(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Service configuration JSON file."),
    create: Optional[bool] = typer.Option(None, "--create/--no-create", help="Create missing tables."),
    update: Optional[bool] = typer.Option(None, "--update/--no-update", help="Update provisioned throughput."),
    wait: Optional[bool] = typer.Option(None, "--wait/--no-wait", help="Wait until tables are ACTIVE."),
) -> None:
    """
    Apply backend defaults to every configured table. Flags override the defaults in the file.
    """
    _setup()
    config = load_service_config(config_path)
    overrides = {
        key: flag
        for key, flag in (("create", create), ("update", update), ("wait_for_active", wait))
        if flag is not None
    }
    defaults = config.backend_defaults.model_copy(update=overrides)
    if not defaults.enabled:
        typer.echo("Nothing to do: create, update and wait are all disabled.")
        return

    # The service applies enabled defaults while it is constructed.
    service = DynamoDbService(config.model_copy(update={"backend_defaults": defaults}))
    typer.echo(f"Synced {len(service.tables)} table(s).")


@app.command()
def get(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Service configuration JSON file."),
    table_name: str = typer.Argument(..., help="Table name."),
    record_id: str = typer.Argument(..., help="Primary key value."),
) -> None:
    """
    Print one record as JSON.
    """
    _setup()
    config = load_service_config(config_path)
    descriptor = _descriptor(config, table_name)
    service = DynamoDbService(config)
    record = asyncio.run(
        service.get_by_id(table_name, _coerce(descriptor, descriptor.hash_key, record_id))
    )
    typer.echo(json.dumps(record.to_simple_dict(), indent=2, default=str))


@app.command()
def search(
    config_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Service configuration JSON file."),
    table_name: str = typer.Argument(..., help="Table name."),
    where: List[str] = typer.Option([], "--where", "-w", help="Equality filter field=value (repeatable)."),
) -> None:
    """
    Print records matching the filters as a table.
    """
    _setup()
    config = load_service_config(config_path)
    descriptor = _descriptor(config, table_name)
    service = DynamoDbService(config)
    records = asyncio.run(service.search(table_name, _parse_where(descriptor, where)))
    columns = list(descriptor.fields)

    table = Table(title=f"{table_name} ({len(records)} match(es))")
    for column in columns:
        table.add_column(column)
    for record in records:
        data = record.to_simple_dict()
        table.add_row(*(str(data.get(column, "")) for column in columns))
    console.print(table)


def main() -> None:
    try:
        app()
    except DataAccessError as exc:
        typer.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
