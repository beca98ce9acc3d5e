# File path: modules/ncr/constants.py

NCR_STATUS_SUBMITTED = "Submitted"
NCR_STATUS_IN_PROGRESS = "In Progress"
NCR_STATUS_UNDER_REVIEW = "Under Review"
NCR_STATUS_CORRECTIVE_ACTION = "Corrective Action"
NCR_STATUS_COMPLETED = "Completed"
NCR_STATUS_CLOSED = "Closed"

NCR_STATUS = (
    NCR_STATUS_SUBMITTED,
    NCR_STATUS_IN_PROGRESS,
    NCR_STATUS_UNDER_REVIEW,
    NCR_STATUS_CORRECTIVE_ACTION,
    NCR_STATUS_COMPLETED,
    NCR_STATUS_CLOSED,
)

NCR_CATEGORIES = (
    "Material Defect",
    "Dimensional Issue",
    "Process Issue",
    "Equipment Failure",
    "Operator Error",
)

NCR_TEXT_FIELDS = (
    "ncr_number", "job_number", "work_order", "operation_number", "part_name",
    "customer_name", "equipment_type", "drawing_number", "issue_category",
    "issue_description", "root_cause", "corrective_action", "status",
    "pdf_report_url", "drawing_url",
)
NCR_NUMBER_FIELDS = ("financial_impact", "planned_hours", "actual_hours")

NCR_SEARCH_FIELDS = ("job_number", "work_order", "customer_name", "equipment_type", "issue_description")
