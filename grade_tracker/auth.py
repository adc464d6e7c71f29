"""Fabricated sessions: any credentials are accepted, nothing is verified."""

import logging
import uuid
from typing import List, Optional

from pydantic import ValidationError

from grade_tracker.config import USERS_KEY, CURRENT_USER_KEY
from grade_tracker.models import Session
from grade_tracker.storage import KeyValueStore, dump_models

logger = logging.getLogger(__name__)

ROLES = ('teacher', 'student')
DEFAULT_EMAIL = "user@example.com"
MIN_PASSWORD_LENGTH = 6

DEMO_TEACHER = Session(
    id="teacher-1",
    name="Class Teacher",
    email="teacher@example.com",
    role="teacher",
)


class RegistrationError(ValueError):
    """Registration rejected (duplicate email or student code)."""


def _load_users(store: KeyValueStore) -> List[Session]:
    users = []
    for entry in store.get_item(USERS_KEY, []) or []:
        try:
            users.append(Session.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping invalid user entry: %s", e)
    return users


def _save_users(store: KeyValueStore, users: List[Session]) -> None:
    store.set_item(USERS_KEY, dump_models(users))


def seed_users(store: KeyValueStore) -> List[Session]:
    """Make sure the demo teacher account exists."""
    users = _load_users(store)
    if users:
        return users
    users = [DEMO_TEACHER]
    _save_users(store, users)
    return users


def login(store: KeyValueStore, email: str, password: str, role: str) -> Session:
    """
    Sign in with any email and password.

    The password is accepted but never stored or checked.

    Raises:
        ValueError: If role is not teacher or student
    """
    if role not in ROLES:
        raise ValueError(f"Role must be one of: {', '.join(ROLES)}")

    trimmed_email = (email or '').strip().lower() or DEFAULT_EMAIL
    session = Session(
        id=f"{role}-{uuid.uuid4().hex}",
        name=trimmed_email.split('@')[0] or "User",
        email=trimmed_email,
        role=role,
    )

    users = [u for u in _load_users(store) if u.email != trimmed_email]
    users.append(session)
    store.set_items({
        USERS_KEY: dump_models(users),
        CURRENT_USER_KEY: session.model_dump(mode='json'),
    })
    logger.info("Signed in %s as %s", trimmed_email, role)
    return session


def logout(store: KeyValueStore) -> None:
    store.remove_item(CURRENT_USER_KEY)


def current_session(store: KeyValueStore) -> Optional[Session]:
    raw = store.get_item(CURRENT_USER_KEY)
    if raw is None:
        return None
    try:
        return Session.model_validate(raw)
    except ValidationError as e:
        logger.warning("Discarding invalid session record: %s", e)
        return None


def register_student(store: KeyValueStore, name: str, student_code: str, email: str, password: str) -> Session:
    """Create a student account. The password is length-checked, not persisted."""
    trimmed_email = email.strip().lower()
    trimmed_code = student_code.strip()

    if not name.strip() or not trimmed_code or not trimmed_email:
        raise RegistrationError("All fields are required.")
    if '@' not in trimmed_email:
        raise RegistrationError("Please enter a valid email.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    users = _load_users(store)

    if any(u.email.lower() == trimmed_email for u in users):
        raise RegistrationError("Email is already registered.")
    if any(u.student_code and u.student_code.lower() == trimmed_code.lower() for u in users):
        raise RegistrationError("Student ID already exists.")

    user = Session(
        id=f"student-{uuid.uuid4().hex}",
        name=name.strip(),
        email=trimmed_email,
        role='student',
        student_code=trimmed_code,
    )
    _save_users(store, users + [user])
    logger.info("Registered student %s", trimmed_email)
    return user
