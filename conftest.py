"""
测试公共夹具
使用独立的内存 SQLite 引擎替换 get_db，每个测试用例重新建表，并写入默认标签和缺陷类型
"""
import os
import tempfile

# 必须在导入应用之前设置
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INIT_DB_ON_STARTUP"] = "false"
os.environ["DEBUG"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="qa-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from models import Base, User, UserRole, UserStatus
from models.database import enable_sqlite_foreign_keys, get_db
from utils.auth import create_user_token, get_password_hash
from utils.init_default_data import init_default_data

TEST_PASSWORD = "secret123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """每个测试用例使用全新的表结构"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        init_default_data(db, with_admin=False)
    finally:
        db.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def create_user(db, name: str, email: str, role: UserRole, status: UserStatus = UserStatus.ACTIVE) -> User:
    user = User(
        name=name,
        email=email,
        password=get_password_hash(TEST_PASSWORD),
        role=role,
        status=status,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def admin_user(db_session):
    return create_user(db_session, "Alice Admin", "admin@test.com", UserRole.ADMIN)


@pytest.fixture
def qa_user(db_session):
    return create_user(db_session, "Quinn QA", "qa@test.com", UserRole.QA)


@pytest.fixture
def developer_user(db_session):
    return create_user(db_session, "Dev Developer", "dev@test.com", UserRole.DEVELOPER)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def qa_headers(qa_user):
    return auth_headers(qa_user)


@pytest.fixture
def developer_headers(developer_user):
    return auth_headers(developer_user)


@pytest.fixture
def project(client, admin_headers, qa_user):
    """由管理员创建、QA 为成员的项目"""
    response = client.post("/api/projects", json={
        "name": "Checkout Revamp",
        "description": "New checkout flow",
        "clientName": "Acme",
        "members": [{"userId": qa_user.id, "role": "Lead"}],
    }, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def issue_factory(client, qa_headers):
    """创建缺陷的工厂函数"""
    def _create(project_id: str, **fields):
        payload = {
            "projectId": project_id,
            "moduleName": "Payments",
            "type": "Bug",
            "severity": "High",
            "description": "Card declined for valid card",
        }
        payload.update(fields)
        response = client.post("/api/issues", json=payload, headers=qa_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create
