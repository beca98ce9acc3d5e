# File path: modules/shared/status.py

# Jobs
JOB_STATUS_NEW = "New"
JOB_STATUS_IN_PROGRESS = "In Progress"
JOB_STATUS_DELAYED = "Delayed"
JOB_STATUS_COMPLETED = "Completed"
JOB_STATUS_ON_HOLD = "On Hold"
JOB_STATUS_CANCELLED = "Cancelled"

JOB_STATUSES = (
    JOB_STATUS_NEW,
    JOB_STATUS_IN_PROGRESS,
    JOB_STATUS_DELAYED,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_ON_HOLD,
)

TERMINAL_JOB_STATUSES = (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_CANCELLED,
)

PRIORITY_HIGH = "High"
PRIORITY_MEDIUM = "Medium"
PRIORITY_LOW = "Low"

PRIORITIES = (PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW)

# Purchase orders
PO_STATUS_OPEN = "Open"
PO_STATUS_IN_PROGRESS = "In Progress"
PO_STATUS_RECEIVED = "Received"
PO_STATUS_DELAYED = "Delayed"
PO_STATUS_CLOSED = "Closed"
PO_STATUS_COMPLETED = "Completed"
PO_STATUS_CANCELLED = "Cancelled"

PO_STATUSES = (
    PO_STATUS_OPEN,
    PO_STATUS_IN_PROGRESS,
    PO_STATUS_RECEIVED,
    PO_STATUS_DELAYED,
    PO_STATUS_CLOSED,
    PO_STATUS_COMPLETED,
    PO_STATUS_CANCELLED,
)

# Shipments
SHIPMENT_SCHEDULED = "Scheduled"
SHIPMENT_IN_TRANSIT = "In Transit"
SHIPMENT_DELIVERED = "Delivered"
SHIPMENT_DELAYED = "Delayed"

SHIPMENT_STATUSES = (SHIPMENT_SCHEDULED, SHIPMENT_IN_TRANSIT, SHIPMENT_DELIVERED, SHIPMENT_DELAYED)

SHIPMENT_INBOUND = "Inbound"
SHIPMENT_OUTBOUND = "Outbound"

# Timeline entries
TIMELINE_COMPLETED = "completed"
TIMELINE_IN_PROGRESS = "in-progress"
TIMELINE_PENDING = "pending"

# Work centers
WORK_CENTER_RUNNING = "Running"
WORK_CENTER_IDLE = "Idle"
