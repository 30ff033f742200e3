"""Shared pytest fixtures for studio tests."""

import pytest

from studio import metrics
from studio.credentials import CredentialGate
from studio.gemini import GeminiClient
from studio.pipeline.image_store import ImageSetStore
from studio.pipeline.models import UploadedImage
from studio.pipeline.storage import MediaStore

from .fakes import API_BASE, FakeGeminiAPI, make_candidate, make_image


@pytest.fixture(autouse=True)
def clean_metrics():
    """Metrics are module-global; start every test from zero."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def fake_api() -> FakeGeminiAPI:
    return FakeGeminiAPI()


@pytest.fixture
def credentials() -> CredentialGate:
    return CredentialGate(api_key="test-key")


@pytest.fixture
def client(credentials: CredentialGate, fake_api: FakeGeminiAPI) -> GeminiClient:
    return GeminiClient(credentials, api_base=API_BASE, transport=fake_api.transport)


@pytest.fixture
def media() -> MediaStore:
    return MediaStore()


@pytest.fixture
def five_images() -> tuple[UploadedImage, ...]:
    return tuple(make_image(i) for i in range(5))


@pytest.fixture
def filled_store() -> ImageSetStore:
    store = ImageSetStore(max_images=40)
    store.add([make_candidate(i) for i in range(5)])
    return store
