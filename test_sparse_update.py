"""稀疏更新工具测试"""
import pytest

from models import Label
from utils.exceptions import FileOperationException, ResourceNotFoundException, ValidationException
from utils.sparse_update import ABSENT, apply_sparse_update, build_partial_update, reject_null_fields

LABEL_FIELDS = {"name": "name", "color": "color", "description": "description"}


def test_absent_is_falsy_singleton():
    assert not ABSENT
    assert ABSENT is type(ABSENT)()


def test_build_partial_update_skips_absent_keeps_null():
    assignments = build_partial_update([("name", "x"), ("color", ABSENT), ("description", None)])
    assert assignments == {"name": "x", "description": None}
    assert list(assignments) == ["name", "description"]


def test_build_partial_update_rejects_empty():
    with pytest.raises(ValidationException):
        build_partial_update([("name", ABSENT)])
    assert build_partial_update([("name", ABSENT)], allow_empty=True) == {}


def test_apply_sparse_update_only_touches_given_fields(db_session):
    label = db_session.query(Label).filter(Label.name == "bug").one()
    old_color = label.color

    written = apply_sparse_update(db_session, Label, label.id, {"description": None, "unknown": 1}, LABEL_FIELDS)
    db_session.commit()
    db_session.expire_all()

    assert set(written) == {"description", "updated_at"}
    label = db_session.get(Label, label.id)
    assert label.description is None
    assert label.color == old_color


def test_apply_sparse_update_missing_row(db_session):
    with pytest.raises(ResourceNotFoundException):
        apply_sparse_update(db_session, Label, 99999, {"name": "x"}, LABEL_FIELDS, not_found_message="Label not found")
    db_session.rollback()


def test_reject_null_fields_names_the_field():
    reject_null_fields({"name": "x", "description": None}, ("name", "status"))

    with pytest.raises(ValidationException) as excinfo:
        reject_null_fields({"name": "x", "status": None}, ("name", "status"))
    assert excinfo.value.message == "status cannot be null"
    assert excinfo.value.fields == ["status"]
    assert excinfo.value.data == {"fields": ["status"]}
    assert excinfo.value.status_code == 400


def test_exception_defaults_come_from_class():
    not_found = ResourceNotFoundException()
    assert (not_found.status_code, not_found.message) == (404, "Resource not found")

    too_large = FileOperationException("too big", status_code=413)
    assert too_large.status_code == 413
    assert FileOperationException.status_code == 400
