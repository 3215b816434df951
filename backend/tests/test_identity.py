"""Identity resolution: provisioning on first sight, collisions surfaced as validation errors."""

import pytest
from sqlmodel import Session, select

from spearo.models.user import User
from spearo.services.errors import ValidationFailedError
from spearo.services.identity import derive_username, resolve_user


def test_first_sight_provisions_user_with_defaults(session: Session):
    user = resolve_user(session, "auth0|abc", "Diver1@Example.com ", "diver1")

    assert user.id is not None
    assert user.username == "diver1"
    assert user.email == "diver1@example.com"
    assert user.bio == ""
    assert user.profile_picture == ""
    assert user.total_catches == 0
    assert user.favorite_spots == []
    assert user.followers == []
    assert user.following == []


def test_known_identity_returned_unchanged(session: Session):
    first = resolve_user(session, "auth0|abc", "diver1@example.com", "diver1")
    again = resolve_user(session, "auth0|abc", "other@example.com", "someone-else")

    assert again.id == first.id
    assert again.username == "diver1"
    assert again.email == "diver1@example.com"
    assert len(session.exec(select(User)).all()) == 1


def test_username_falls_back_to_email_local_part(session: Session):
    user = resolve_user(session, "auth0|xyz", "reef.hunter@example.com", None)
    assert user.username == "reef.hunter"

    blank_nick = resolve_user(session, "auth0|xyz2", "kelp@example.com", "   ")
    assert blank_nick.username == "kelp"


def test_derive_username_requires_email_without_nickname():
    with pytest.raises(ValidationFailedError):
        derive_username(None, None)


def test_empty_external_id_rejected(session: Session):
    with pytest.raises(ValidationFailedError):
        resolve_user(session, "", "diver1@example.com", "diver1")


def test_derived_username_collision_is_validation_error(session: Session):
    resolve_user(session, "auth0|one", "diver@example.com", "diver")

    with pytest.raises(ValidationFailedError):
        resolve_user(session, "auth0|two", "diver@other.com", None)

    # Nothing provisioned for the second identity
    assert session.exec(select(User).where(User.auth0_id == "auth0|two")).first() is None


def test_email_collision_is_validation_error(session: Session):
    resolve_user(session, "auth0|one", "same@example.com", "first")

    with pytest.raises(ValidationFailedError):
        resolve_user(session, "auth0|two", "SAME@example.com", "second")


def test_short_derived_username_rejected(session: Session):
    with pytest.raises(ValidationFailedError):
        resolve_user(session, "auth0|short", "ab@example.com", None)


def test_derive_username_strips_nickname():
    assert derive_username("diver1@example.com", "  bluewater ") == "bluewater"


def test_padded_nickname_stored_trimmed(session: Session):
    user = resolve_user(session, "auth0|padded", "padded@example.com", "  kelpforest  ")
    assert user.username == "kelpforest"
