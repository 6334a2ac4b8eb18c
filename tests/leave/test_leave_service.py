from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hr_roster.hr_roster.core.enums import Decision, LeaveType, RequestStatus, Role, ShiftType, Violation
from src.hr_roster.hr_roster.core.exceptions import AuthorizationError, NotFoundError, PolicyViolation, ValidationError

EMPLOYEE, SUPERVISOR, OWNER = 1, 10, 100


@pytest.fixture
def staff(store):
    store.add_employee(EMPLOYEE)
    store.add_employee(2)
    store.add_employee(SUPERVISOR, Role.ADMIN)
    store.add_employee(11, Role.ADMIN)
    store.add_employee(OWNER, Role.OWNER)


@pytest.fixture
def submit(container, fixed_now, staff):
    def _submit(start: date, end: date | None = None, *, leave_type=LeaveType.ANNUAL, employee_id=EMPLOYEE, doc=None):
        if doc is None and leave_type != LeaveType.ANNUAL:
            doc = "certificate.pdf"
        return container.leave_service.submit(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            support_doc=doc,
            today=fixed_now.date(),
            now=fixed_now,
        )

    return _submit


def decide(container, request_id, approver_id=SUPERVISOR, decision=Decision.APPROVE):
    return container.leave_service.decide(
        request_id=request_id,
        approver_id=approver_id,
        decision=decision,
        now=datetime(2026, 2, 2, 12, 0),
    )


def test_submit_creates_pending_request(submit, store):
    request_id = submit(date(2026, 2, 10), date(2026, 2, 12))

    request = store.leaves[request_id]
    assert request.status == RequestStatus.PENDING
    assert request.days == 3
    assert store.employees[EMPLOYEE].annual_leave_balance == 14


def test_single_day_request_defaults_end_date(submit, store):
    request_id = submit(date(2026, 2, 10))

    assert store.leaves[request_id].end_date == date(2026, 2, 10)


def test_reversed_range_is_invalid(submit):
    with pytest.raises(ValidationError):
        submit(date(2026, 2, 12), date(2026, 2, 10))


@pytest.mark.parametrize(
    "start, end, leave_type, doc, code",
    [
        (date(2026, 2, 1), date(2026, 2, 1), LeaveType.SICK, None, Violation.PAST_DATE),
        (date(2026, 2, 5), date(2026, 2, 5), LeaveType.ANNUAL, None, Violation.ADVANCE_NOTICE),
        (date(2026, 2, 10), date(2026, 2, 15), LeaveType.ANNUAL, None, Violation.MAX_DURATION),
        (date(2026, 2, 3), date(2026, 2, 3), LeaveType.SICK, "  ", Violation.MISSING_DOCUMENT),
        (date(2026, 2, 3), date(2026, 2, 3), LeaveType.EMERGENCY, "  ", Violation.MISSING_DOCUMENT),
    ],
)
def test_submission_policy_gates(submit, store, start, end, leave_type, doc, code):
    with pytest.raises(PolicyViolation) as exc:
        submit(start, end, leave_type=leave_type, doc=doc)

    assert exc.value.code == code
    assert store.leaves == {}


def test_submit_with_insufficient_balance(submit, store):
    store.add_employee(EMPLOYEE, emergency_leave_balance=2)

    with pytest.raises(PolicyViolation) as exc:
        submit(date(2026, 2, 3), date(2026, 2, 5), leave_type=LeaveType.EMERGENCY)

    assert exc.value.code == Violation.INSUFFICIENT_BALANCE


def test_overlapping_requests_are_rejected(submit):
    submit(date(2026, 2, 10), date(2026, 2, 12))

    with pytest.raises(PolicyViolation) as exc:
        submit(date(2026, 2, 11), date(2026, 2, 13))
    assert exc.value.code == Violation.OVERLAP

    assert submit(date(2026, 2, 13), date(2026, 2, 15))


def test_approved_leave_blocks_overlapping_submission(submit, store):
    store.add_leave(EMPLOYEE, date(2026, 2, 10), date(2026, 2, 12), status=RequestStatus.APPROVED)

    with pytest.raises(PolicyViolation) as exc:
        submit(date(2026, 2, 11), date(2026, 2, 13))
    assert exc.value.code == Violation.OVERLAP

    assert submit(date(2026, 2, 13), date(2026, 2, 15))


def test_rejected_request_does_not_block_new_one(container, submit):
    request_id = submit(date(2026, 2, 10), date(2026, 2, 12))
    decide(container, request_id, decision=Decision.REJECT)

    assert submit(date(2026, 2, 11), date(2026, 2, 13))


def test_approve_annual_deducts_balance_and_keeps_roster(container, submit, store, notifier):
    entry_id = store.add_entry(EMPLOYEE, date(2026, 2, 10), ShiftType.MORNING)
    request_id = submit(date(2026, 2, 10), date(2026, 2, 12))

    result = decide(container, request_id)

    assert result.status == RequestStatus.APPROVED
    assert result.reassignment is None
    assert store.leaves[request_id].status == RequestStatus.APPROVED
    assert store.leaves[request_id].decided_by == SUPERVISOR
    assert store.employees[EMPLOYEE].annual_leave_balance == 11
    assert entry_id in store.entries
    assert [e.status for e in notifier.events] == [RequestStatus.APPROVED]


@pytest.mark.parametrize(
    "leave_type, remaining",
    [(LeaveType.SICK, 12), (LeaveType.EMERGENCY, 5)],
)
def test_approve_cascading_leave_removes_roster_entries(container, submit, store, notifier, leave_type, remaining):
    store.add_entry(EMPLOYEE, date(2026, 2, 3), ShiftType.MORNING)
    store.add_entry(EMPLOYEE, date(2026, 2, 4), ShiftType.EVENING)
    outside = store.add_entry(EMPLOYEE, date(2026, 2, 6), ShiftType.MORNING)
    other = store.add_entry(2, date(2026, 2, 3), ShiftType.EVENING)
    request_id = submit(date(2026, 2, 3), date(2026, 2, 4), leave_type=leave_type)

    result = decide(container, request_id)

    assert result.reassignment is not None
    assert result.reassignment.count == 2
    assert result.reassignment.employee_name == "User 1"
    assert sorted(store.entries) == sorted([outside, other])
    assert store.employees[EMPLOYEE].balance(leave_type) == remaining
    assert notifier.events[0].reassignment == result.reassignment
    assert result.to_dict()["reassignment_needed"]["count"] == 2


def test_approve_sick_leave_without_roster_has_no_reassignment(container, submit):
    request_id = submit(date(2026, 2, 3), leave_type=LeaveType.SICK)

    assert decide(container, request_id).reassignment is None


def test_reject_keeps_balance(container, submit, store):
    request_id = submit(date(2026, 2, 10), date(2026, 2, 12))

    result = decide(container, request_id, decision=Decision.REJECT)

    assert result.status == RequestStatus.REJECTED
    assert store.employees[EMPLOYEE].annual_leave_balance == 14


def test_second_decision_is_rejected(container, submit, store):
    request_id = submit(date(2026, 2, 10), date(2026, 2, 12))
    decide(container, request_id)

    with pytest.raises(PolicyViolation) as exc:
        decide(container, request_id, decision=Decision.REJECT)

    assert exc.value.code == Violation.NOT_PENDING
    assert store.leaves[request_id].status == RequestStatus.APPROVED
    assert store.employees[EMPLOYEE].annual_leave_balance == 11


def test_approval_rechecks_balance_and_rolls_back(container, submit, store):
    entry_id = store.add_entry(EMPLOYEE, date(2026, 2, 3), ShiftType.MORNING)
    request_id = submit(date(2026, 2, 3), date(2026, 2, 5), leave_type=LeaveType.SICK)
    store.add_employee(EMPLOYEE, sick_leave_balance=1)

    with pytest.raises(PolicyViolation) as exc:
        decide(container, request_id)

    assert exc.value.code == Violation.INSUFFICIENT_BALANCE
    assert store.leaves[request_id].status == RequestStatus.PENDING
    assert store.employees[EMPLOYEE].sick_leave_balance == 1
    assert entry_id in store.entries


@pytest.mark.parametrize(
    "requester, approver",
    [
        (EMPLOYEE, 2),
        (EMPLOYEE, OWNER),
        (SUPERVISOR, SUPERVISOR),
        (SUPERVISOR, 11),
    ],
)
def test_decision_hierarchy(container, submit, store, requester, approver):
    request_id = submit(date(2026, 2, 10), employee_id=requester)

    with pytest.raises(AuthorizationError):
        decide(container, request_id, approver_id=approver)

    assert store.leaves[request_id].status == RequestStatus.PENDING


def test_owner_decides_supervisor_request(container, submit, store):
    request_id = submit(date(2026, 2, 10), employee_id=SUPERVISOR)

    decide(container, request_id, approver_id=OWNER)

    assert store.leaves[request_id].status == RequestStatus.APPROVED


def test_decide_unknown_request(container, staff):
    with pytest.raises(NotFoundError):
        decide(container, 12345)


def test_notification_failure_does_not_undo_decision(container, submit, store, notifier):
    notifier.fail = True
    request_id = submit(date(2026, 2, 10))

    result = decide(container, request_id)

    assert result.status == RequestStatus.APPROVED
    assert store.leaves[request_id].status == RequestStatus.APPROVED
    assert len(notifier.events) == 1


def test_withdraw_pending_request(container, submit, store):
    request_id = submit(date(2026, 2, 10))

    container.leave_service.withdraw(request_id=request_id, employee_id=EMPLOYEE)

    assert request_id not in store.leaves


def test_withdraw_rules(container, submit):
    request_id = submit(date(2026, 2, 10))

    with pytest.raises(AuthorizationError):
        container.leave_service.withdraw(request_id=request_id, employee_id=2)

    decide(container, request_id)
    with pytest.raises(PolicyViolation) as exc:
        container.leave_service.withdraw(request_id=request_id, employee_id=EMPLOYEE)
    assert exc.value.code == Violation.NOT_PENDING


def test_list_for_viewer_scopes_by_role(container, submit):
    own = submit(date(2026, 2, 10))
    colleague = submit(date(2026, 2, 10), employee_id=2)
    supervisor = submit(date(2026, 2, 10), employee_id=SUPERVISOR)

    def ids(viewer_id):
        return {r.request_id for r in container.leave_service.list_for_viewer(viewer_id=viewer_id)}

    assert ids(EMPLOYEE) == {own}
    assert ids(SUPERVISOR) == {own, colleague, supervisor}
    assert ids(OWNER) == {supervisor}


def test_balances_and_totals(container, submit):
    decide(container, submit(date(2026, 2, 10)))
    decide(container, submit(date(2026, 2, 3), leave_type=LeaveType.SICK, employee_id=2))

    balances = container.leave_service.balances(employee_id=EMPLOYEE).to_dict()
    assert balances == {"Annual Leave": 13, "Sick Leave": 14, "Emergency Leave": 7}

    totals = container.leave_service.approved_totals(viewer_id=SUPERVISOR)
    assert totals == {"Annual Leave": 1, "Sick Leave": 1, "Emergency Leave": 0}

    with pytest.raises(AuthorizationError):
        container.leave_service.approved_totals(viewer_id=EMPLOYEE)


def test_restore_balance_is_capped(container, store, staff):
    store.add_employee(EMPLOYEE, emergency_leave_balance=5)

    balance = container.leave_service.restore_balance(
        actor_id=SUPERVISOR,
        employee_id=EMPLOYEE,
        leave_type=LeaveType.EMERGENCY,
        days=4,
    )

    assert balance == 7
    assert store.employees[EMPLOYEE].emergency_leave_balance == 7


def test_restore_balance_requires_authority(container, staff):
    with pytest.raises(AuthorizationError):
        container.leave_service.restore_balance(
            actor_id=2,
            employee_id=EMPLOYEE,
            leave_type=LeaveType.ANNUAL,
            days=1,
        )
