# This project was developed with assistance from AI tools.
"""
Domain enums for the lead pipeline.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class PipelineStage(str, enum.Enum):
    """Pipeline stage keyed by its stable storage key, carrying a display label."""

    def __new__(cls, key: str, label: str):
        obj = str.__new__(cls, key)
        obj._value_ = key
        obj.label = label
        return obj

    LEADS = ("leads", "Leads")
    PENDING_APP = ("pending-app", "Pending App")
    SCREENING = ("screening", "Screening")
    PRE_QUALIFIED = ("pre-qualified", "Pre-Qualified")
    PRE_APPROVED = ("pre-approved", "Pre-Approved")
    ACTIVE = ("active", "Active")
    PAST_CLIENTS = ("past-clients", "Past Clients")

    @classmethod
    def ordered(cls) -> tuple["PipelineStage", ...]:
        """Stages in pipeline order. Past clients sit outside the order."""
        return (
            cls.LEADS,
            cls.PENDING_APP,
            cls.SCREENING,
            cls.PRE_QUALIFIED,
            cls.PRE_APPROVED,
            cls.ACTIVE,
        )

    @classmethod
    def from_key(cls, key: str | None) -> "PipelineStage | None":
        """Resolve a stage from its key or display label (case-insensitive).

        Returns None for unknown or legacy values.
        """
        if not key:
            return None
        needle = key.strip().lower()
        for stage in cls:
            if needle in (stage.value, stage.label.lower()):
                return stage
        return None

    @classmethod
    def index_of(cls, key: str | None) -> int:
        """Position in the pipeline order, or -1 when the key is not ordered."""
        stage = cls.from_key(key)
        if stage is None:
            return -1
        try:
            return cls.ordered().index(stage)
        except ValueError:
            return -1


class PipelineSection(str, enum.Enum):
    INCOMING = "Incoming"
    LIVE = "Live"
    CLOSED = "Closed"


class ActiveSubStatus(str, enum.Enum):
    """Loan status while a lead sits in the Active stage.

    SUB is stored as ``SUV`` for compatibility with existing rows.
    """

    def __new__(cls, code: str, label: str):
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.label = label
        return obj

    NEW = ("NEW", "NEW")
    RFP = ("RFP", "RFP")
    SUB = ("SUV", "SUB")
    AWC = ("AWC", "AWC")
    CTC = ("CTC", "CTC")

    @classmethod
    def from_code(cls, code: str | None) -> "ActiveSubStatus | None":
        """Accept either the stored code or the display label."""
        if not code:
            return None
        needle = code.strip().upper()
        for status in cls:
            if needle in (status.value, status.label):
                return status
        return None


class PastClientStatus(str, enum.Enum):
    CLOSED = "Closed"
    NEEDS_SUPPORT = "Needs Support"
    NEW_LEAD = "New Lead"

    @classmethod
    def from_raw(cls, value: str | None) -> "PastClientStatus":
        """Map a free-form status string; anything unrecognised is Closed."""
        if value:
            needle = value.strip().lower()
            for status in cls:
                if status.value.lower() == needle:
                    return status
            # Older rows used "Need Support"
            if needle == "need support":
                return cls.NEEDS_SUPPORT
        return cls.CLOSED


class LeadStrength(str, enum.Enum):
    HOT = "Hot"
    WARM = "Warm"
    COLD = "Cold"
    QUALIFIED = "Qualified"


class LikelyToApply(str, enum.Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TransactionType(str, enum.Enum):
    """Purchase vs. refinance flag (``pr_type``)."""

    PURCHASE = "P"
    REFINANCE = "R"
    HELOC = "HELOC"


class ConditionStatus(str, enum.Enum):
    ADDED = "1_added"
    REQUESTED = "2_requested"
    RE_REQUESTED = "3_re_requested"
    COLLECTED = "4_collected"
    SENT_TO_LENDER = "5_sent_to_lender"
    CLEARED = "6_cleared"

    @property
    def position(self) -> int:
        return int(self.value.split("_", 1)[0])

    @property
    def label(self) -> str:
        return self.value.split("_", 1)[1].replace("_", " ").title()

    @classmethod
    def early_statuses(cls) -> frozenset["ConditionStatus"]:
        """Statuses that have not yet produced a document."""
        return frozenset({cls.ADDED, cls.REQUESTED, cls.RE_REQUESTED})

    @classmethod
    def document_statuses(cls) -> frozenset["ConditionStatus"]:
        """Statuses that require a document on file to enter."""
        return frozenset({cls.COLLECTED, cls.SENT_TO_LENDER, cls.CLEARED})


class ConditionPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
