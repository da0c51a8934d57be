"""
Shared test fixtures for all test modules.

Provides:
- Test environment setup (TESTING=true, secrets, placeholder generator)
- A fresh application (and therefore a fresh repository) per test
- Signed bearer tokens for two distinct users
"""

import os

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================

# Must be set before anything from studyhub is imported
os.environ["TESTING"] = "true"
os.environ["STUDYHUB_SECRET_KEY"] = os.environ.get("STUDYHUB_SECRET_KEY", "test-secret-key-for-testing")
os.environ["STUDYHUB_GENERATOR"] = "placeholder"
os.environ["STUDYHUB_GENERATION_DELAY_SECONDS"] = "0"

from fastapi.testclient import TestClient  # noqa: E402

from studyhub.auth import create_access_token  # noqa: E402
from studyhub.config import settings  # noqa: E402
from studyhub.content_generator import PlaceholderContentGenerator  # noqa: E402
from studyhub.file_processor import FileProcessor  # noqa: E402
from studyhub.main import create_app  # noqa: E402
from studyhub.repository import InMemoryStudyRepository  # noqa: E402


# =============================================================================
# Unit Fixtures
# =============================================================================

@pytest.fixture
def repo():
    """Empty in-memory repository."""
    return InMemoryStudyRepository()


@pytest.fixture
def generator():
    """Deterministic generator with no simulated delay."""
    return PlaceholderContentGenerator(delay_seconds=0)


@pytest.fixture
def file_processor(tmp_path):
    """File processor writing into a per-test directory."""
    return FileProcessor(tmp_path / "uploads", settings.max_upload_bytes)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def test_settings(tmp_path):
    """Global settings with uploads redirected to a per-test directory."""
    return settings.model_copy(update={"upload_dir": str(tmp_path / "uploads")})


@pytest.fixture
def app(test_settings):
    return create_app(app_settings=test_settings)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as c:
        yield c


def bearer(subject: str, email: str = None, name: str = None) -> dict:
    claims = {"sub": subject}
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def make_headers():
    """Factory for headers carrying a token for an arbitrary subject."""
    return bearer


@pytest.fixture
def auth_headers():
    """Headers for a user named Ada."""
    return bearer("uid-ada-0001", email="ada@example.com", name="Ada Lovelace")


@pytest.fixture
def other_auth_headers():
    """Headers for a second, unrelated user."""
    return bearer("uid-grace-0002", email="grace@example.com")


# =============================================================================
# Sample Files
# =============================================================================

def build_text_pdf(text: str) -> bytes:
    """Single-page PDF drawing ``text`` in Helvetica."""
    stream = f"BT /F1 12 Tf 20 100 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 400 200] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture
def text_pdf():
    return build_text_pdf("Photosynthesis converts light into chemical energy")
