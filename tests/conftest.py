import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.database import Base, build_engine
from app.dependencies import get_db, get_identity_resolver
from app.main import app
from app.models.share import Share
from app.schemas.auth import Identity
from app.services.shares import ShareService
from app.stores.shares import ShareStore

test_engine = build_engine(settings.test_database_url)
TestSession = sessionmaker(bind=test_engine)

SENDER_ID = "550e8400-e29b-41d4-a716-446655440001"
RECIPIENT_ID = "550e8400-e29b-41d4-a716-446655440002"
OUTSIDER_ID = "550e8400-e29b-41d4-a716-446655440003"
MEDIA_ID = "7f3c2b1a-0d4e-4f5a-9b8c-1d2e3f4a5b6c"


class FakeResolver:
    """Accepts ``Bearer token-<user id>`` for any known user."""

    def __init__(self, identities):
        self.identities = {f"Bearer token-{i.id}": i for i in identities}

    def resolve(self, authorization, cookie):
        return self.identities.get(authorization)


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestSession(bind=connection)
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def sender():
    return Identity(id=SENDER_ID, username="testuser1")


@pytest.fixture
def recipient():
    return Identity(id=RECIPIENT_ID, username="testuser2")


@pytest.fixture
def outsider():
    return Identity(id=OUTSIDER_ID, username="testuser3")


@pytest.fixture
def client(db, sender, recipient, outsider):
    def override_get_db():
        yield db

    resolver = FakeResolver([sender, recipient, outsider])
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_resolver] = lambda: resolver
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def headers_for(identity):
    return {"Authorization": f"Bearer token-{identity.id}"}


@pytest.fixture
def sender_headers(sender):
    return headers_for(sender)


@pytest.fixture
def recipient_headers(recipient):
    return headers_for(recipient)


@pytest.fixture
def outsider_headers(outsider):
    return headers_for(outsider)


@pytest.fixture
def store(db):
    return ShareStore(db)


@pytest.fixture
def service(store):
    return ShareService(store)


@pytest.fixture
def share(db):
    share = Share(
        media_id=MEDIA_ID,
        from_user_id=SENDER_ID,
        to_user_id=RECIPIENT_ID,
        message="Check out this awesome video!",
    )
    db.add(share)
    db.flush()
    return share
