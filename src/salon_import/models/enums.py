from __future__ import annotations

from enum import Enum


class JobType(str, Enum):
    """Supported import job categories."""

    CUSTOMER_HISTORY = "customer_history"  # Legacy POS transaction history.


class JobStatus(str, Enum):
    """Lifecycle status for an import job."""

    QUEUED = "queued"  # Created by the upload handler, waiting in queue.
    PROCESSING = "processing"  # Orchestrator is working through groups.
    COMPLETED = "completed"  # All groups attempted; see progress for failures.
    FAILED = "failed"  # Pipeline-level failure, no further groups attempted.


class TaskType(str, Enum):
    """Queue task types handled by the worker."""

    PROCESS_IMPORT = "process_import"


class TransactionType(str, Enum):
    """Kind of item sold on one legacy row."""

    SERVICE = "service"
    PRODUCT = "product"


class MatchKind(str, Enum):
    """How a textual reference was matched to a canonical record."""

    EXACT = "exact"
    FUZZY = "fuzzy"


class PaymentBucket(str, Enum):
    """Payment breakdown buckets on a reconstructed invoice."""

    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    OTHER = "other"
