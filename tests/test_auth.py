"""Unit tests for fabricated sessions and student registration."""

import pytest

from grade_tracker import auth
from grade_tracker.config import USERS_KEY
from grade_tracker.storage import MemoryStore


def test_seed_users_once():
    store = MemoryStore()
    users = auth.seed_users(store)
    assert [u.email for u in users] == ['teacher@example.com']

    auth.register_student(store, 'Asha', 'S001', 'asha@school.test', 'secret1')
    assert len(auth.seed_users(store)) == 2


def test_login_accepts_any_credentials():
    store = MemoryStore()
    session = auth.login(store, '  Asha@School.Test ', 'whatever', 'student')

    assert session.email == 'asha@school.test'
    assert session.name == 'asha'
    assert session.role == 'student'
    assert session.id.startswith('student-')
    assert auth.current_session(store) == session


def test_login_blank_email_and_upsert():
    store = MemoryStore()
    first = auth.login(store, '', '', 'teacher')
    assert first.email == auth.DEFAULT_EMAIL

    second = auth.login(store, 'user@example.com', 'x', 'teacher')
    users = store.get_item(USERS_KEY)
    assert len(users) == 1
    assert users[0]['id'] == second.id


def test_login_never_stores_password():
    store = MemoryStore()
    auth.login(store, 'a@b.c', 'hunter2', 'teacher')
    assert 'hunter2' not in str(store.get_item(USERS_KEY))


def test_login_rejects_unknown_role():
    with pytest.raises(ValueError):
        auth.login(MemoryStore(), 'a@b.c', 'x', 'admin')


def test_logout():
    store = MemoryStore()
    auth.login(store, 'a@b.c', 'x', 'teacher')
    auth.logout(store)
    assert auth.current_session(store) is None


def test_register_student():
    store = MemoryStore()
    user = auth.register_student(store, ' Asha ', ' S001 ', 'ASHA@school.test', 'secret1')

    assert user.role == 'student'
    assert user.name == 'Asha'
    assert user.student_code == 'S001'
    assert user.email == 'asha@school.test'


@pytest.mark.parametrize('name,code,email,password,message', [
    ('', 'S9', 'x@school.test', 'secret1', "All fields are required."),
    ('X', 'S9', 'x.school.test', 'secret1', "valid email"),
    ('X', 'S9', 'x@school.test', '123', "at least 6"),
    ('X', 'S9', 'asha@school.test', 'secret1', "Email is already registered."),
    ('X', 's001', 'x@school.test', 'secret1', "Student ID already exists."),
])
def test_register_student_rejections(name, code, email, password, message):
    store = MemoryStore()
    auth.register_student(store, 'Asha', 'S001', 'asha@school.test', 'secret1')
    with pytest.raises(auth.RegistrationError, match=message):
        auth.register_student(store, name, code, email, password)
