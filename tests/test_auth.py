from __future__ import annotations

import pytest

from src.attendance_portal.attendance_portal.core.enums import Role
from src.attendance_portal.attendance_portal.core.exceptions import AuthenticationError
from src.attendance_portal.attendance_portal.users.service import AuthService, build_user_table


def test_demo_users_can_log_in():
    auth = AuthService()

    assert auth.authenticate("student1", "password").role == Role.STUDENT
    assert auth.authenticate("hod1", "password").role == Role.HOD
    assert auth.authenticate(" faculty1 ", "password").role == Role.FACULTY


def test_passwords_are_stored_hashed():
    users = build_user_table()
    assert users["student1"].password_hash != "password"


@pytest.mark.parametrize(
    "username,password",
    [("student1", "wrong"), ("nobody", "password"), ("", "")],
)
def test_bad_credentials_are_rejected(username, password):
    with pytest.raises(AuthenticationError):
        AuthService().authenticate(username, password)


def test_custom_user_table():
    auth = AuthService(build_user_table({"dean": ("s3cret", Role.HOD)}))

    assert auth.authenticate("dean", "s3cret").username == "dean"
    with pytest.raises(AuthenticationError):
        auth.authenticate("student1", "password")
