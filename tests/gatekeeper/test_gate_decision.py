import pytest

from src.campus_ops.campus_ops.core.enums import GateDecision, Standing


@pytest.mark.parametrize("decision", list(GateDecision))
def test_every_decision_has_status_and_message(decision):
    assert decision.http_status in {200, 403, 404, 500}
    assert decision.message_template


def test_status_classes():
    assert [d for d in GateDecision if d.http_status == 200] == [GateDecision.SUCCESS, GateDecision.PARTIAL]
    assert GateDecision.UNKNOWN.http_status == 404
    assert GateDecision.ERROR.http_status == 500
    assert {d for d in GateDecision if d.http_status == 403} == {
        GateDecision.DEFAULTER,
        GateDecision.BLOCKED,
        GateDecision.NO_CLASS_TODAY,
        GateDecision.TOO_EARLY,
        GateDecision.TOO_LATE,
    }


def test_only_success_and_partial_permit_entry():
    assert {d for d in GateDecision if d.permits_entry} == {GateDecision.SUCCESS, GateDecision.PARTIAL}


def test_render():
    assert GateDecision.PARTIAL.render(currency="PKR", balance=15000) == "Entry Permitted - Balance: PKR 15,000"
    assert GateDecision.BLOCKED.render(standing="Expelled") == "Entry Denied - Student is Expelled"


def test_blocked_standings():
    assert {s for s in Standing if s.is_blocked} == {Standing.SUSPENDED, Standing.EXPELLED}
