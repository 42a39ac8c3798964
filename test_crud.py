"""
Functional tests for PesXChange CRUD operations.
"""

import pytest
from sqlalchemy.exc import OperationalError

from conftest import USER_X_ID, USER_Y_ID, USER_Z_ID
from pesxchange.core.exceptions import NotFoundError, StoreError, ValidationError
from pesxchange.crud import crud_category, crud_message, crud_user
from pesxchange.schemas.user import IdentityProfile


def test_user_upsert_from_identity(db):
    """Profiles are keyed by SRN and refreshed on later logins"""
    created = crud_user.upsert_from_identity(
        db, profile_in=IdentityProfile(name="Asha Rao", srn="pes2ug24cs001", branch="CSE")
    )
    assert created.srn == "PES2UG24CS001"

    refreshed = crud_user.upsert_from_identity(
        db, profile_in=IdentityProfile(name="Asha R", srn="PES2UG24CS001", semester="Sem-4")
    )
    assert refreshed.id == created.id
    assert refreshed.name == "Asha R"
    assert refreshed.branch == "CSE"
    assert refreshed.semester == "Sem-4"

    assert crud_user.get_by_srn(db, "pes2ug24cs001").id == created.id


def test_user_batch_lookup(db, user_x, user_y):
    users = crud_user.get_map(db, {USER_X_ID, USER_Y_ID, USER_Z_ID})

    assert set(users) == {USER_X_ID, USER_Y_ID}
    assert crud_user.get_many(db, []) == []


def test_category_get_or_create(db):
    books = crud_category.get_or_create(db, name="Books")
    again = crud_category.get_or_create(db, name="Books")

    assert books.id == again.id
    assert crud_category.get_or_create(db, name="Others") is None
    assert crud_category.get_or_create(db, name=None) is None


def test_insert_message_validates(db, user_x, user_y):
    with pytest.raises(ValidationError):
        crud_message.insert_message(db, sender_id="bad", receiver_id=USER_Y_ID, body="hi")
    with pytest.raises(ValidationError):
        crud_message.insert_message(db, sender_id=USER_X_ID, receiver_id=USER_Y_ID, body="  \n ")
    with pytest.raises(NotFoundError):
        crud_message.insert_message(db, sender_id=USER_X_ID, receiver_id=USER_Z_ID, body="hi")


def test_insert_message_accepts_strings(db, user_x, user_y):
    message = crud_message.insert_message(
        db, sender_id=str(USER_X_ID), receiver_id=str(USER_Y_ID), body=" hi "
    )

    assert message.id is not None
    assert message.created_at is not None
    assert message.message == "hi"


def test_insert_failure_is_store_error(db, user_x, user_y, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(StoreError):
        crud_message.insert_message(db, sender_id=USER_X_ID, receiver_id=USER_Y_ID, body="hi")


def test_fetch_conversation_failure_is_store_error(db, user_x, monkeypatch):
    def failing_scalars(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "scalars", failing_scalars)

    with pytest.raises(StoreError):
        crud_message.fetch_conversation(db, user_a=USER_X_ID, user_b=USER_Y_ID)


def test_active_counterparts(db, user_x, user_y, user_z, monkeypatch):
    crud_message.insert_message(db, sender_id=USER_X_ID, receiver_id=USER_Y_ID, body="a")
    crud_message.insert_message(db, sender_id=USER_Z_ID, receiver_id=USER_X_ID, body="b")
    crud_message.insert_message(db, sender_id=USER_Y_ID, receiver_id=USER_Z_ID, body="c")

    assert crud_message.fetch_active_counterparts(db, user_id=USER_X_ID) == {USER_Y_ID, USER_Z_ID}

    def failing_scalars(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "scalars", failing_scalars)
    assert crud_message.fetch_active_counterparts(db, user_id=USER_X_ID) == set()
