# File path: database/models.py
# Change summary:
# -V1 Jobs, notes, reminders backed by the jobs table
# -V1 Two operation shapes: sap_operations (snake_case) and job_operations (SAP export names)
# -V2 Logistics tables: purchase_orders, shipmentlogs, vendor_operations, job_timelines
# -V2 NCR tracker table
# -V3 Derived work_centers + system_settings stamps
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import UniqueConstraint
from werkzeug.security import generate_password_hash, check_password_hash


db = SQLAlchemy()


ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_SHOP_LEAD = "shop_lead"
ROLE_MACHINIST = "machinist"

USER_ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_SHOP_LEAD, ROLE_MACHINIST)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), default=ROLE_MACHINIST)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def is_manager(self):
        return self.role in (ROLE_ADMIN, ROLE_MANAGER)


class Job(db.Model):
    __tablename__ = "jobs"

    id = db.Column(db.Integer, primary_key=True)

    job_number = db.Column(db.String(64), nullable=False, unique=True, index=True)
    title = db.Column(db.String(200), nullable=False, default="")
    description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="New", index=True)

    due_date = db.Column(db.DateTime)
    scheduled_date = db.Column(db.DateTime)
    priority = db.Column(db.String(10), default="Medium")
    progress = db.Column(db.Integer, nullable=False, default=0)

    work_center = db.Column(db.String(64), index=True)
    customer = db.Column(db.String(200))
    reference_name = db.Column(db.String(200))
    had_issues = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    job_notes = db.relationship("JobNote", back_populates="job", cascade="all, delete-orphan")
    reminders = db.relationship("JobReminder", back_populates="job", cascade="all, delete-orphan")


class JobNote(db.Model):
    __tablename__ = "job_notes"
    id = db.Column(db.Integer, primary_key=True)

    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    job = db.relationship("Job", back_populates="job_notes")

    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class JobReminder(db.Model):
    __tablename__ = "job_reminders"
    id = db.Column(db.Integer, primary_key=True)

    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    job = db.relationship("Job", back_populates="reminders")

    date = db.Column(db.DateTime, nullable=False)
    description = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class SapOperation(db.Model):
    """
    Operation rows in snake_case form (one per order + operation number).
    """
    __tablename__ = "sap_operations"
    __table_args__ = (
        UniqueConstraint("order_number", "operation_number", name="uq_sap_order_operation"),
    )

    id = db.Column(db.Integer, primary_key=True)

    order_number = db.Column(db.String(64), nullable=False, index=True)
    operation_number = db.Column(db.String(32), nullable=False)
    work_center = db.Column(db.String(64), index=True)
    description = db.Column(db.Text)
    short_text = db.Column(db.Text)

    planned_work = db.Column(db.Float, nullable=False, default=0.0)
    actual_work = db.Column(db.Float, nullable=False, default=0.0)
    status = db.Column(db.String(32), default="Not Started")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class JobOperation(db.Model):
    """
    Operation rows as exported from SAP; column names are the export headers.
    """
    __tablename__ = "job_operations"
    __table_args__ = (
        UniqueConstraint("Order", "Oper./Act.", name="uq_job_operation_order_op"),
    )

    id = db.Column(db.Integer, primary_key=True)

    sales_document = db.Column("Sales Document", db.String(64), index=True)
    order = db.Column("Order", db.String(64), index=True)
    operation_number = db.Column("Oper./Act.", db.String(32))
    work_center = db.Column("Oper.WorkCenter", db.String(64))
    description = db.Column("Description", db.Text)
    short_text = db.Column("Opr. short text", db.Text)
    work = db.Column("Work", db.Float, default=0.0)
    actual_work = db.Column("Actual work", db.Float, default=0.0)


class PurchaseOrder(db.Model):
    __tablename__ = "purchase_orders"

    id = db.Column(db.Integer, primary_key=True)

    po_number = db.Column(db.String(64), nullable=False, unique=True, index=True)

    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, index=True)
    job = db.relationship("Job")

    vendor = db.Column(db.String(200))
    amount = db.Column(db.Float, default=0.0)
    status = db.Column(db.String(32), default="Open", index=True)

    issue_date = db.Column(db.DateTime)
    expected_date = db.Column(db.DateTime)
    received_date = db.Column(db.DateTime)

    notes = db.Column(db.Text)
    description = db.Column(db.Text)
    severity = db.Column(db.String(16))

    # spreadsheet columns
    req_tracking_number = db.Column(db.String(64))
    item = db.Column(db.String(32))
    purchasing_group = db.Column(db.String(32))
    short_text = db.Column(db.Text)
    order_quantity = db.Column(db.Float, default=0.0)
    net_price = db.Column(db.Float, default=0.0)
    remaining_quantity = db.Column(db.Float, default=0.0)
    remaining_value = db.Column(db.Float, default=0.0)
    material = db.Column(db.String(64))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ShipmentLog(db.Model):
    __tablename__ = "shipmentlogs"

    id = db.Column(db.Integer, primary_key=True)

    po_number = db.Column(db.String(64), nullable=True, index=True)
    vendor = db.Column(db.String(200))

    shipment_date = db.Column(db.DateTime)
    expected_delivery = db.Column(db.DateTime)
    received_date = db.Column(db.DateTime)

    status = db.Column(db.String(32), default="Scheduled")
    tracking_number = db.Column(db.String(64))
    carrier = db.Column(db.String(64))
    shipment_type = db.Column(db.String(16))  # Inbound | Outbound
    origin = db.Column(db.String(120))
    destination = db.Column(db.String(120))
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class VendorOperation(db.Model):
    __tablename__ = "vendor_operations"

    id = db.Column(db.Integer, primary_key=True)

    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    operation = db.Column(db.Text)
    vendor = db.Column(db.String(200))
    date_range = db.Column(db.String(64))
    status = db.Column(db.String(32))
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class JobTimeline(db.Model):
    __tablename__ = "job_timelines"

    id = db.Column(db.Integer, primary_key=True)

    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(16), default="pending")  # completed | in-progress | pending
    vendor = db.Column(db.String(200))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class NCR(db.Model):
    __tablename__ = "ncrs"

    id = db.Column(db.Integer, primary_key=True)

    ncr_number = db.Column(db.String(32), nullable=False, unique=True, index=True)
    job_number = db.Column(db.String(64), nullable=False, index=True)
    work_order = db.Column(db.String(64))
    operation_number = db.Column(db.String(32))
    part_name = db.Column(db.String(200))
    customer_name = db.Column(db.String(200))

    equipment_type = db.Column(db.String(120))
    drawing_number = db.Column(db.String(120))
    issue_category = db.Column(db.String(64))
    issue_description = db.Column(db.Text)
    root_cause = db.Column(db.Text)
    corrective_action = db.Column(db.Text)

    financial_impact = db.Column(db.Float, default=0.0)
    planned_hours = db.Column(db.Float, default=0.0)
    actual_hours = db.Column(db.Float, default=0.0)
    status = db.Column(db.String(32), default="Submitted", index=True)

    pdf_report_url = db.Column(db.String(500))
    drawing_url = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class WorkCenter(db.Model):
    """
    Snapshot derived from operation rows; refreshed, never edited by hand.
    """
    __tablename__ = "work_centers"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(64), nullable=False, unique=True, index=True)
    type = db.Column(db.String(64), default="Manufacturing")
    status = db.Column(db.String(32), default="Idle")
    utilization = db.Column(db.Integer, nullable=False, default=0)

    active_jobs = db.Column(db.Integer, nullable=False, default=0)
    total_capacity = db.Column(db.Integer, nullable=False, default=100)
    operator_count = db.Column(db.Integer, nullable=False, default=1)

    last_maintenance = db.Column(db.DateTime)
    next_maintenance = db.Column(db.DateTime)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class SystemSetting(db.Model):
    __tablename__ = "system_settings"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(120), nullable=False, unique=True, index=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
