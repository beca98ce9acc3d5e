"""initial dashboard tables

Revision ID: 5c1e2a9d7b40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1e2a9d7b40'
down_revision = None
branch_labels = None
depends_on = None


def _stamps(updated=True):
    cols = [sa.Column("created_at", sa.DateTime(), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(), nullable=False))
    return cols


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("role", sa.String(16)),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_number", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("due_date", sa.DateTime()),
        sa.Column("scheduled_date", sa.DateTime()),
        sa.Column("priority", sa.String(10)),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("work_center", sa.String(64)),
        sa.Column("customer", sa.String(200)),
        sa.Column("reference_name", sa.String(200)),
        sa.Column("had_issues", sa.Boolean(), nullable=False),
        *_stamps(),
    )
    op.create_index("ix_jobs_job_number", "jobs", ["job_number"], unique=True)
    op.create_index("ix_jobs_status", "jobs", ["status"])
    op.create_index("ix_jobs_work_center", "jobs", ["work_center"])

    op.create_table(
        "job_notes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_stamps(updated=False),
    )
    op.create_index("ix_job_notes_job_id", "job_notes", ["job_id"])

    op.create_table(
        "job_reminders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        *_stamps(updated=False),
    )
    op.create_index("ix_job_reminders_job_id", "job_reminders", ["job_id"])

    op.create_table(
        "sap_operations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_number", sa.String(64), nullable=False),
        sa.Column("operation_number", sa.String(32), nullable=False),
        sa.Column("work_center", sa.String(64)),
        sa.Column("description", sa.Text()),
        sa.Column("short_text", sa.Text()),
        sa.Column("planned_work", sa.Float(), nullable=False),
        sa.Column("actual_work", sa.Float(), nullable=False),
        sa.Column("status", sa.String(32)),
        *_stamps(),
        sa.UniqueConstraint("order_number", "operation_number", name="uq_sap_order_operation"),
    )
    op.create_index("ix_sap_operations_order_number", "sap_operations", ["order_number"])
    op.create_index("ix_sap_operations_work_center", "sap_operations", ["work_center"])

    op.create_table(
        "job_operations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("Sales Document", sa.String(64)),
        sa.Column("Order", sa.String(64)),
        sa.Column("Oper./Act.", sa.String(32)),
        sa.Column("Oper.WorkCenter", sa.String(64)),
        sa.Column("Description", sa.Text()),
        sa.Column("Opr. short text", sa.Text()),
        sa.Column("Work", sa.Float()),
        sa.Column("Actual work", sa.Float()),
        sa.UniqueConstraint("Order", "Oper./Act.", name="uq_job_operation_order_op"),
    )
    op.create_index("ix_job_operations_Sales Document", "job_operations", ["Sales Document"])
    op.create_index("ix_job_operations_Order", "job_operations", ["Order"])

    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("po_number", sa.String(64), nullable=False),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="SET NULL")),
        sa.Column("vendor", sa.String(200)),
        sa.Column("amount", sa.Float()),
        sa.Column("status", sa.String(32)),
        sa.Column("issue_date", sa.DateTime()),
        sa.Column("expected_date", sa.DateTime()),
        sa.Column("received_date", sa.DateTime()),
        sa.Column("notes", sa.Text()),
        sa.Column("description", sa.Text()),
        sa.Column("severity", sa.String(16)),
        sa.Column("req_tracking_number", sa.String(64)),
        sa.Column("item", sa.String(32)),
        sa.Column("purchasing_group", sa.String(32)),
        sa.Column("short_text", sa.Text()),
        sa.Column("order_quantity", sa.Float()),
        sa.Column("net_price", sa.Float()),
        sa.Column("remaining_quantity", sa.Float()),
        sa.Column("remaining_value", sa.Float()),
        sa.Column("material", sa.String(64)),
        *_stamps(),
    )
    op.create_index("ix_purchase_orders_po_number", "purchase_orders", ["po_number"], unique=True)
    op.create_index("ix_purchase_orders_job_id", "purchase_orders", ["job_id"])
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"])

    op.create_table(
        "shipmentlogs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("po_number", sa.String(64)),
        sa.Column("vendor", sa.String(200)),
        sa.Column("shipment_date", sa.DateTime()),
        sa.Column("expected_delivery", sa.DateTime()),
        sa.Column("received_date", sa.DateTime()),
        sa.Column("status", sa.String(32)),
        sa.Column("tracking_number", sa.String(64)),
        sa.Column("carrier", sa.String(64)),
        sa.Column("shipment_type", sa.String(16)),
        sa.Column("origin", sa.String(120)),
        sa.Column("destination", sa.String(120)),
        sa.Column("notes", sa.Text()),
        *_stamps(),
    )
    op.create_index("ix_shipmentlogs_po_number", "shipmentlogs", ["po_number"])

    op.create_table(
        "vendor_operations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("operation", sa.Text()),
        sa.Column("vendor", sa.String(200)),
        sa.Column("date_range", sa.String(64)),
        sa.Column("status", sa.String(32)),
        sa.Column("notes", sa.Text()),
        *_stamps(),
    )
    op.create_index("ix_vendor_operations_job_id", "vendor_operations", ["job_id"])

    op.create_table(
        "job_timelines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(16)),
        sa.Column("vendor", sa.String(200)),
        *_stamps(updated=False),
    )
    op.create_index("ix_job_timelines_job_id", "job_timelines", ["job_id"])

    op.create_table(
        "ncrs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ncr_number", sa.String(32), nullable=False),
        sa.Column("job_number", sa.String(64), nullable=False),
        sa.Column("work_order", sa.String(64)),
        sa.Column("operation_number", sa.String(32)),
        sa.Column("part_name", sa.String(200)),
        sa.Column("customer_name", sa.String(200)),
        sa.Column("equipment_type", sa.String(120)),
        sa.Column("drawing_number", sa.String(120)),
        sa.Column("issue_category", sa.String(64)),
        sa.Column("issue_description", sa.Text()),
        sa.Column("root_cause", sa.Text()),
        sa.Column("corrective_action", sa.Text()),
        sa.Column("financial_impact", sa.Float()),
        sa.Column("planned_hours", sa.Float()),
        sa.Column("actual_hours", sa.Float()),
        sa.Column("status", sa.String(32)),
        sa.Column("pdf_report_url", sa.String(500)),
        sa.Column("drawing_url", sa.String(500)),
        *_stamps(),
    )
    op.create_index("ix_ncrs_ncr_number", "ncrs", ["ncr_number"], unique=True)
    op.create_index("ix_ncrs_job_number", "ncrs", ["job_number"])
    op.create_index("ix_ncrs_status", "ncrs", ["status"])

    op.create_table(
        "work_centers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("type", sa.String(64)),
        sa.Column("status", sa.String(32)),
        sa.Column("utilization", sa.Integer(), nullable=False),
        sa.Column("active_jobs", sa.Integer(), nullable=False),
        sa.Column("total_capacity", sa.Integer(), nullable=False),
        sa.Column("operator_count", sa.Integer(), nullable=False),
        sa.Column("last_maintenance", sa.DateTime()),
        sa.Column("next_maintenance", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_work_centers_name", "work_centers", ["name"], unique=True)

    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(120), nullable=False),
        sa.Column("value", sa.Text()),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_system_settings_key", "system_settings", ["key"], unique=True)


def downgrade():
    for table in (
        "system_settings",
        "work_centers",
        "ncrs",
        "job_timelines",
        "vendor_operations",
        "shipmentlogs",
        "purchase_orders",
        "job_operations",
        "sap_operations",
        "job_reminders",
        "job_notes",
        "jobs",
        "users",
    ):
        op.drop_table(table)
