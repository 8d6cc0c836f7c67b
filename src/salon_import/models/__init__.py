"""Public model exports for API schema v1."""

from salon_import.models.api_responses import (
    CreateImportJobResponse,
    ImportedInvoiceListResponse,
    ImportJobListResponse,
    ImportJobResponse,
)
from salon_import.models.common import ErrorInfo
from salon_import.models.enums import (
    JobStatus,
    JobType,
    MatchKind,
    PaymentBucket,
    TaskType,
    TransactionType,
)
from salon_import.models.version import SCHEMA_VERSION

__all__ = [
    "CreateImportJobResponse",
    "ErrorInfo",
    "ImportJobListResponse",
    "ImportJobResponse",
    "ImportedInvoiceListResponse",
    "JobStatus",
    "JobType",
    "MatchKind",
    "PaymentBucket",
    "SCHEMA_VERSION",
    "TaskType",
    "TransactionType",
]
