# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    ActiveSubStatus,
    ConditionPriority,
    ConditionStatus,
    LeadStrength,
    LikelyToApply,
    PastClientStatus,
    PipelineSection,
    PipelineStage,
    TransactionType,
)
from .models import (
    ConditionStatusHistory,
    Lead,
    LeadCondition,
    StageHistory,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ActiveSubStatus",
    "ConditionPriority",
    "ConditionStatus",
    "LeadStrength",
    "LikelyToApply",
    "PastClientStatus",
    "PipelineSection",
    "PipelineStage",
    "TransactionType",
    # Models
    "ConditionStatusHistory",
    "Lead",
    "LeadCondition",
    "StageHistory",
]
