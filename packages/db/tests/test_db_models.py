# This project was developed with assistance from AI tools.
"""Model and enum tests (no database required)."""

import pytest

from db import Base, ConditionStatus, Lead, LeadCondition, StageHistory
from db.enums import ActiveSubStatus, PastClientStatus, PipelineStage


def test_all_tables_registered():
    assert set(Base.metadata.tables) == {
        "leads",
        "lead_conditions",
        "condition_status_history",
        "stage_history",
    }


def test_lead_stage_is_plain_string():
    """Legacy stage values must load, so the column is not an enum."""
    column = Lead.__table__.c.stage
    assert column.type.python_type is str
    assert column.default.arg == "leads"


def test_condition_status_persists_values():
    column = LeadCondition.__table__.c.status
    assert list(column.type.enums) == [s.value for s in ConditionStatus]


def test_history_tables_cascade_from_parent():
    fk = next(iter(StageHistory.__table__.c.lead_id.foreign_keys))
    assert fk.ondelete == "CASCADE"


@pytest.mark.parametrize(
    "key,expected",
    [
        ("leads", PipelineStage.LEADS),
        ("Pending App", PipelineStage.PENDING_APP),
        ("PRE-APPROVED", PipelineStage.PRE_APPROVED),
        ("past-clients", PipelineStage.PAST_CLIENTS),
        ("legacy-bucket", None),
        (None, None),
    ],
)
def test_stage_from_key(key, expected):
    assert PipelineStage.from_key(key) is expected


def test_stage_index_of():
    assert PipelineStage.index_of("leads") == 0
    assert PipelineStage.index_of("active") == 5
    assert PipelineStage.index_of("past-clients") == -1
    assert PipelineStage.index_of("unknown") == -1


def test_stage_label():
    assert PipelineStage.PRE_QUALIFIED.label == "Pre-Qualified"
    assert PipelineStage.PRE_QUALIFIED == "pre-qualified"


def test_active_sub_status_sub_stored_as_suv():
    assert ActiveSubStatus.SUB.value == "SUV"
    assert ActiveSubStatus.from_code("SUB") is ActiveSubStatus.SUB
    assert ActiveSubStatus.from_code("suv") is ActiveSubStatus.SUB
    assert ActiveSubStatus.from_code("XYZ") is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Closed", PastClientStatus.CLOSED),
        ("needs support", PastClientStatus.NEEDS_SUPPORT),
        ("Need Support", PastClientStatus.NEEDS_SUPPORT),
        ("New Lead", PastClientStatus.NEW_LEAD),
        ("whatever", PastClientStatus.CLOSED),
        (None, PastClientStatus.CLOSED),
    ],
)
def test_past_client_status_from_raw(raw, expected):
    assert PastClientStatus.from_raw(raw) is expected


def test_condition_status_ordering():
    assert [s.position for s in ConditionStatus] == [1, 2, 3, 4, 5, 6]
    assert ConditionStatus.SENT_TO_LENDER.label == "Sent To Lender"
    assert ConditionStatus.early_statuses().isdisjoint(ConditionStatus.document_statuses())
