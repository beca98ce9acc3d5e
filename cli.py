# File path: cli.py
# Flask CLI commands for table setup, spreadsheet imports and data repair.
import logging

import click
from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from database.models import ROLE_MACHINIST, USER_ROLES, db

logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    logger.error(message)
    raise click.exceptions.Exit(1)


def register_cli(app: Flask) -> None:

    @app.cli.command("init-tables")
    def init_tables():
        """Create every table and report which ones are empty."""
        from modules.admin.services.diagnostics import check_tables_exist

        try:
            db.create_all()
        except SQLAlchemyError as e:
            _fail(f"Creating tables failed: {e}")

        for table, info in check_tables_exist().items():
            if not info["exists"]:
                click.echo(f"{table}: missing")
            elif info["count"] == 0:
                click.echo(f"{table}: empty")
            else:
                click.echo(f"{table}: {info['count']} rows")

    @app.cli.command("import-purchase-orders")
    @click.argument("path", type=click.Path(dir_okay=False))
    @click.option("--append", is_flag=True, help="Keep existing purchase orders.")
    def import_purchase_orders_cmd(path, append):
        """Load a purchase-order spreadsheet export."""
        from modules.backend import BackendError
        from modules.imports.excel import SpreadsheetImportError, import_purchase_orders

        try:
            result = import_purchase_orders(path, replace=not append)
        except (SpreadsheetImportError, BackendError) as e:
            _fail(f"Purchase order import failed: {e}")

        click.echo(
            f"Imported {result.rows} purchase orders in {result.batches} batches "
            f"({result.failed} failed)"
        )
        if not result.ok:
            _fail("Some purchase order batches failed")

    @app.cli.command("import-operations")
    @click.argument("path", type=click.Path(dir_okay=False))
    def import_operations_cmd(path):
        """Load an SAP operations spreadsheet export."""
        from modules.backend import BackendError
        from modules.imports.excel import SpreadsheetImportError
        from modules.operations.services import import_operations_workbook

        try:
            result = import_operations_workbook(path)
        except (SpreadsheetImportError, BackendError) as e:
            _fail(f"Operations import failed: {e}")

        click.echo(
            f"Imported {result['rows']} rows: {result['sap_operations']} SAP operations, "
            f"{result['job_operations']} job operations"
        )

    @app.cli.command("seed-sample-data")
    @click.option("--table", "tables", multiple=True, help="Limit seeding to these tables.")
    def seed_sample_data(tables):
        """Insert sample rows into empty tables."""
        from modules.admin.services.seeding import insert_test_data

        try:
            results = insert_test_data(list(tables) if tables else None)
        except ValueError as e:
            _fail(str(e))
        failed = False
        for table, outcome in results.items():
            click.echo(f"{table}: {outcome}")
            failed = failed or isinstance(outcome, str)
        if failed:
            _fail("Seeding finished with errors")

    @app.cli.command("link-purchase-orders")
    def link_purchase_orders():
        """Link purchase orders to jobs and rebuild vendor operations and timelines."""
        from modules.backend import ConfigError
        from modules.logistics.services.repair import fix_logistics_data

        try:
            report = fix_logistics_data()
        except ConfigError as e:
            _fail(str(e))

        click.echo(report.message())
        if not report.success:
            _fail("Logistics repair finished with errors")

    @app.cli.command("refresh-work-centers")
    def refresh_work_centers():
        """Derive work-center rows from the current operations."""
        from modules.backend import BackendError
        from modules.work_centers.services.work_center_service import update_work_centers_from_operations

        try:
            centers = update_work_centers_from_operations()
        except BackendError as e:
            _fail(f"Work center refresh failed: {e}")

        click.echo(f"Refreshed {len(centers)} work centers")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("password")
    @click.option("--role", type=click.Choice(USER_ROLES), default=ROLE_MACHINIST, show_default=True)
    def create_user_cmd(username, password, role):
        """Create a login account."""
        from modules.user.services import UserError, create_user

        try:
            user = create_user(username, password, role)
        except UserError as e:
            _fail(str(e))

        click.echo(f"Created user '{user.username}' ({user.role})")
