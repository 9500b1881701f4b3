"""默认数据初始化测试"""
from models import IssueType, Label, User, UserRole
from utils.auth import verify_password
from utils.init_default_data import DEFAULT_ADMIN, DEFAULT_LABELS, init_default_data


def test_seeding_is_idempotent(db_session):
    init_default_data(db_session)
    init_default_data(db_session)

    assert db_session.query(Label).count() == len(DEFAULT_LABELS)
    assert db_session.query(IssueType).count() == 3

    admins = db_session.query(User).filter(User.email == DEFAULT_ADMIN["email"]).all()
    assert len(admins) == 1
    assert admins[0].role == UserRole.ADMIN
    assert verify_password(DEFAULT_ADMIN["password"], admins[0].password)
    assert admins[0].id.startswith("user-")


def test_seeded_admin_can_log_in(client, db_session):
    init_default_data(db_session)
    response = client.post(
        "/api/auth/login",
        json={"email": DEFAULT_ADMIN["email"], "password": DEFAULT_ADMIN["password"]},
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "Admin"
