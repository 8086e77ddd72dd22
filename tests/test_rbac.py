import pytest

from app.core.errors import Forbidden
from app.core.rbac import Role, can_manage_event, ensure_staff, is_artist, is_staff
from app.models.event import Event
from app.models.profile import Profile


@pytest.mark.parametrize(
    "role,staff,artist",
    [
        ("owner", True, False),
        ("admin", True, False),
        ("reviewer", True, False),
        ("artist", False, True),
        (None, False, False),
        ("", False, False),
        ("Owner", False, False),
        ("ADMIN", False, False),
        ("collector", False, False),
        ("superuser", False, False),
        (Role.admin, True, False),
        (Role.artist, False, True),
        (42, False, False),
    ],
)
def test_truth_table(role, staff, artist):
    assert is_staff(role) is staff
    assert is_artist(role) is artist


def test_ensure_staff():
    ensure_staff(Profile(id=1, email="a@x.com", role="reviewer", hashed_password="x"))
    with pytest.raises(Forbidden):
        ensure_staff(Profile(id=2, email="b@x.com", role="artist", hashed_password="x"))
    with pytest.raises(Forbidden):
        ensure_staff(None)


def test_can_manage_event():
    ev = Event(artist_user_id=7)
    owner_artist = Profile(id=7, email="a@x.com", role="artist", hashed_password="x")
    other_artist = Profile(id=8, email="b@x.com", role="artist", hashed_password="x")
    collector = Profile(id=7, email="c@x.com", role=None, hashed_password="x")
    admin = Profile(id=9, email="d@x.com", role="admin", hashed_password="x")

    assert can_manage_event(owner_artist, ev)
    assert not can_manage_event(other_artist, ev)
    assert not can_manage_event(collector, ev)
    assert can_manage_event(admin, ev)
    assert not can_manage_event(None, ev)
