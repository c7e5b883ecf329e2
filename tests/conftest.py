"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures for unit and integration tests.
The document store runs on in-memory SQLite (one database per test event
loop); the GCS bucket is a MagicMock.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Dict, List
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from faker import Faker
from httpx import AsyncClient, ASGITransport

# Set test environment before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault(
    "SESSION_SECRET_KEY", "test-secret-key-for-testing-purposes-only-32chars"
)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GCS_BUCKET_NAME", "test-bucket")
os.environ.setdefault("BLOB_PUBLIC_BASE_URL", "https://storage.googleapis.com")

fake = Faker()

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "CorrectHorse42!"
BASE_TIME = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
FROZEN_CLOCK = 1700000000.123


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API)")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "db: Database tests")
    config.addinivalue_line("markers", "api: API endpoint tests")


# =============================================================================
# Test Data Generators
# =============================================================================

def make_lawyer_data(**overrides) -> Dict[str, Any]:
    """Lawyer application document as written by the onboarding form."""
    data = {
        "fullName": fake.name(),
        "emailAddress": fake.email(),
        "mobileNumber": fake.numerify("98########"),
        "profileImage": "",
        "barCouncilEnrollment": {
            "stateBarCouncil": "Bar Council of Delhi",
            "enrollmentNumber": fake.bothify("D/####/####"),
            "yearOfEnrollment": "2015",
        },
        "educationalQualifications": [
            {"degree": "LL.B.", "university": "University of Delhi", "graduationYear": "2014"}
        ],
        "practiceAreas": ["criminal_law", "family_law"],
        "yearsOfExperience": fake.random_int(min=0, max=30),
        "addressDetails": {
            "chamberAddress": fake.street_address(),
            "city": "New Delhi",
            "state": "Delhi",
            "pincode": "110001",
        },
        "languagesProficiency": ["English", "Hindi"],
        "termsAndConditionsAgreement": True,
        "verificationConsent": True,
        "isPayment": False,
        "isApproved": False,
    }
    data.update(overrides)
    return data


def make_transaction_data(**overrides) -> Dict[str, Any]:
    data = {
        "userId": str(uuid.uuid4()),
        "orderId": fake.bothify("order_##########"),
        "paymentId": fake.bothify("pay_##########"),
        "amount": 499,
        "currency": "INR",
        "status": "success",
    }
    data.update(overrides)
    return data


def make_blog_payload(**overrides) -> Dict[str, Any]:
    """Editor payload for a valid blog post."""
    data = {
        "title": "Contract Basics",
        "excerpt": "What every agreement needs before you sign it.",
        "content": "## Offer and acceptance\n\nA contract starts with an offer.",
        "tags": ["Contract Law"],
    }
    data.update(overrides)
    return data


async def seed(store, collection: str, documents: List[Dict[str, Any]]) -> List[str]:
    """Insert documents with strictly increasing createdAt values."""
    ids = []
    for index, document in enumerate(documents):
        created_at = BASE_TIME + timedelta(minutes=index)
        ids.append(
            await store.add(collection, {**document, "createdAt": created_at})
        )
    return ids


@pytest.fixture
def lawyer_data() -> Dict[str, Any]:
    return make_lawyer_data()


@pytest.fixture
def blog_payload() -> Dict[str, Any]:
    return make_blog_payload()


@pytest.fixture
def png_bytes() -> bytes:
    """Small PNG-looking payload."""
    return b"\x89PNG\r\n\x1a\n" + os.urandom(2048)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def database():
    """Fresh in-memory document store tables for the current event loop."""
    from counsel_admin.core.db_client import db

    await db.create_tables()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def store(database):
    from counsel_admin.core.document_store import DocumentStore

    return DocumentStore(database)


# =============================================================================
# Blob Store Fixtures
# =============================================================================

@pytest.fixture
def mock_bucket():
    """
    MagicMock standing in for ``google.cloud.storage.Bucket``.

    ``bucket.blob(key)`` returns the same mock per key; created blobs are
    exposed as ``bucket.blobs``.
    """
    bucket = MagicMock(name="bucket")
    bucket.name = "test-bucket"
    blobs: Dict[str, MagicMock] = {}

    def make_blob(key):
        if key not in blobs:
            blobs[key] = MagicMock(name=f"blob:{key}")
        return blobs[key]

    bucket.blob.side_effect = make_blob
    bucket.blobs = blobs
    return bucket


@pytest.fixture
def blob_store(mock_bucket):
    from counsel_admin.core.blob_store import BlobStore

    return BlobStore(
        bucket_name="test-bucket",
        public_base_url="https://storage.googleapis.com",
        bucket=mock_bucket,
    )


@pytest.fixture
def image_service(blob_store):
    from counsel_admin.services.image_upload import ImageUploadService

    return ImageUploadService(blob_store=blob_store, clock=lambda: FROZEN_CLOCK)


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def lawyer_service(store):
    from counsel_admin.services.lawyer_service import LawyerService

    return LawyerService(store=store)


@pytest.fixture
def transaction_service(store):
    from counsel_admin.services.transaction_service import TransactionService

    return TransactionService(store=store)


@pytest.fixture
def blog_service(store, image_service):
    from counsel_admin.services.blog_service import BlogService

    return BlogService(store=store, images=image_service)


# =============================================================================
# Authentication Fixtures
# =============================================================================

@pytest.fixture
def auth_provider():
    from counsel_admin.core.security import SettingsAuthProvider, hash_password

    return SettingsAuthProvider(
        email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD)
    )


@pytest.fixture
def admin_token() -> str:
    from counsel_admin.core.security import AdminIdentity, create_session_token

    token, _ = create_session_token(AdminIdentity(email=ADMIN_EMAIL))
    return token


@pytest.fixture
def auth_headers(admin_token) -> Dict[str, str]:
    return create_auth_header(admin_token)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app():
    """FastAPI application instance."""
    # Import here to ensure test environment is set
    from counsel_admin.main import app as fastapi_app

    return fastapi_app


@pytest_asyncio.fixture
async def async_client(
    app,
    auth_provider,
    lawyer_service,
    transaction_service,
    blog_service,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with services bound to the test store and mock bucket."""
    from counsel_admin.core.security import get_auth_provider
    from counsel_admin.services.blog_service import get_blog_service
    from counsel_admin.services.lawyer_service import get_lawyer_service
    from counsel_admin.services.transaction_service import get_transaction_service

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_lawyer_service] = lambda: lawyer_service
    app.dependency_overrides[get_transaction_service] = lambda: transaction_service
    app.dependency_overrides[get_blog_service] = lambda: blog_service

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# Helper Functions
# =============================================================================

def create_auth_header(token: str) -> Dict[str, str]:
    """Create an authorization header with a bearer token."""
    return {"Authorization": f"Bearer {token}"}


__all__ = [
    "fake",
    "create_auth_header",
    "make_lawyer_data",
    "make_transaction_data",
    "make_blog_payload",
    "seed",
]
