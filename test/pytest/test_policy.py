# test/pytest/test_policy.py
import pytest

from app.core.errors import AuthorizationError
from app.core.policy import ACTIONS, DENY, FULL, OWN, RESOURCES, authorize, evaluate
from app.schemas.context import UserContext


@pytest.mark.parametrize(
    "role,resource,action,expected",
    [
        ("admin", "assignment", "grade", FULL),
        ("admin", "assignment", "submit", DENY),
        ("teacher", "assignment", "create", OWN),
        ("teacher", "assignment", "submit", DENY),
        ("teacher", "attendance", "read", FULL),
        ("teacher", "attendance", "mark", OWN),
        ("student", "assignment", "submit", OWN),
        ("student", "assignment", "grade", DENY),
        ("student", "schedule", "list", FULL),
        ("student", "schedule", "create", DENY),
        ("student", "attendance", "mark", DENY),
        ("student", "note", "create", OWN),
        ("student", "note", "interact", FULL),
        ("guest", "note", "list", DENY),
        ("teacher", "grades", "list", DENY),
    ],
)
def test_evaluate(role, resource, action, expected):
    assert evaluate(role, resource, action) is expected


def test_admin_allowed_everywhere_but_submit():
    for resource in RESOURCES:
        for action in ACTIONS:
            if (resource, action) == ("assignment", "submit"):
                continue
            assert evaluate("admin", resource, action) is FULL


def test_authorize_denies_with_message():
    student = UserContext(user_id="s1", role="student")
    with pytest.raises(AuthorizationError) as exc:
        authorize(student, "schedule", "create", message="Students cannot create class schedules")
    assert exc.value.message == "Students cannot create class schedules"
    assert exc.value.status_code == 403


def test_authorize_own_only_checks_owner():
    teacher = UserContext(user_id="t1", role="teacher")
    assert authorize(teacher, "assignment", "update", owner_id="t1") is OWN
    with pytest.raises(PermissionError):
        authorize(teacher, "assignment", "update", owner_id="t2")
    # no owner given: only the role is checked
    assert authorize(teacher, "assignment", "update") is OWN


def test_authorize_full_ignores_owner():
    admin = UserContext(user_id="a1", role="admin")
    assert authorize(admin, "assignment", "update", owner_id="t2") is FULL
