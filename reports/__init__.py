"""提成与营收报表核心。

基于只读快照的纯同步转换::

    appointments = filter_appointments(snapshot.appointments, criteria)
    result = aggregate(appointments, snapshot.staff_members, snapshot.services)
    pdf = export_document(appointments, result, snapshot.staff_members,
                          snapshot.services, snapshot.clients)
"""
from .aggregator import aggregate
from .commission import CommissionCalculator, split
from .errors import (
    DanglingReferenceWarning, ExportError, NothingToExportError,
    ReportError, ValidationError,
)
from .exporters import ExportArtifact, export_document, export_workbook, save_artifact
from .filters import FilterCriteria, filter_appointments
from .models import (
    AggregationResult, Appointment, Client, CommissionSplit, Service,
    Snapshot, StaffBreakdown, StaffMember, Totals,
)
from .overview import DashboardOverview, overview, service_usage
from .resolver import NameResolver

__all__ = [
    "aggregate", "split", "CommissionCalculator",
    "filter_appointments", "FilterCriteria",
    "export_document", "export_workbook", "save_artifact", "ExportArtifact",
    "overview", "service_usage", "DashboardOverview", "NameResolver",
    "Appointment", "StaffMember", "Service", "Client", "Snapshot",
    "CommissionSplit", "Totals", "StaffBreakdown", "AggregationResult",
    "ReportError", "ValidationError", "NothingToExportError", "ExportError",
    "DanglingReferenceWarning",
]
