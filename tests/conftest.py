"""
Pytest configuration and shared fixtures for the photo engine tests.
"""
import os
import random
import sys
from typing import AsyncGenerator, Callable, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

def make_pexels_payload(photo_id: int, **overrides) -> dict:
    """One photo descriptor shaped like a Pexels search result entry."""
    payload = {
        "id": photo_id,
        "width": 3000,
        "height": 4500,
        "url": f"https://www.pexels.com/photo/{photo_id}/",
        "photographer": f"Photographer {photo_id}",
        "photographer_url": f"https://www.pexels.com/@p{photo_id}",
        "avg_color": "#7A6B5C",
        "alt": f"Street style outfit {photo_id}",
        "src": {
            "original": f"https://images.pexels.com/photos/{photo_id}/original.jpeg",
            "large2x": f"https://images.pexels.com/photos/{photo_id}/large2x.jpeg",
            "large": f"https://images.pexels.com/photos/{photo_id}/large.jpeg",
            "medium": f"https://images.pexels.com/photos/{photo_id}/medium.jpeg",
            "small": f"https://images.pexels.com/photos/{photo_id}/small.jpeg",
            "tiny": f"https://images.pexels.com/photos/{photo_id}/tiny.jpeg",
        },
    }
    payload.update(overrides)
    return payload


def make_pexels_photos(ids) -> list:
    """PhotoRecords for the given provider ids."""
    from photos.models import photo_from_pexels
    return [photo_from_pexels(make_pexels_payload(i)) for i in ids]


def make_local_photo(photo_id: int = -1, alt_text: str = "Women's street outfit"):
    from photos.models import Attribution, PhotoRecord, PhotoSource, PhotoUrls
    url = f"/images/look_{abs(photo_id)}.jpg"
    return PhotoRecord(
        id=photo_id,
        width=800,
        height=1200,
        urls=PhotoUrls.single(url),
        attribution=Attribution(name="Local Collection"),
        alt_text=alt_text,
        source=PhotoSource.LOCAL,
        avg_color="#CCCCCC",
        page_url=url,
    )


class FakePexelsClient:
    """
    Stand-in for PexelsClient.

    ``responder(query, per_page, page)`` returns photos or raises; every call
    is recorded in ``calls``.
    """

    def __init__(self, responder: Optional[Callable] = None, configured: bool = True):
        self.responder = responder or (lambda query, per_page, page: [])
        self.configured = configured
        self.calls: List[dict] = []

    def is_configured(self) -> bool:
        return self.configured

    def search(self, query, per_page, page=1, orientation="portrait"):
        self.calls.append({"query": query, "per_page": per_page, "page": page, "orientation": orientation})
        return self.responder(query, per_page, page)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so shuffles and page picks are reproducible."""
    return random.Random(42)


@pytest.fixture
def catalog_dir(tmp_path):
    """
    Small local catalog.

    12 women's files, 12 men's files, 2 unisex files and a non-image file.
    """
    images = tmp_path / "images"
    images.mkdir()
    names = (
        [f"ladies_street_{i:02d}.jpg" for i in range(6)]
        + [f"ladies_formal_{i:02d}.png" for i in range(6)]
        + [f"gents_casual_{i:02d}.jpg" for i in range(6)]
        + [f"gents_business_{i:02d}.webp" for i in range(6)]
        + ["shared_look_01.jpg", "shared_look_02.jpeg"]
    )
    for name in names:
        (images / name).write_bytes(b"\xff\xd8\xff")
    (images / "README.txt").write_text("not an image")
    return images


@pytest.fixture
def gender_rules_file(catalog_dir):
    """Rules document tagging the shared looks unisex."""
    import json
    path = catalog_dir / "gender_rules.json"
    path.write_text(json.dumps({
        "items": {
            "shared_look_01.jpg": "unisex",
            "shared_look_02.jpeg": "unisex",
        },
        "audiences": {
            "male": {"include": ["gents"], "exclude": ["ladies"]},
            "female": {"include": ["ladies"], "exclude": ["gents"]},
        },
    }))
    return path


@pytest.fixture
def catalog(catalog_dir, gender_rules_file, rng):
    from photos.catalog import CatalogFilter
    return CatalogFilter(catalog_dir, rules_path=gender_rules_file, rng=rng)


@pytest.fixture
def recency_cache():
    from photos.recency_cache import RecencyCache
    return RecencyCache()


# ============================================================================
# Fixtures: Mock Services
# ============================================================================

@pytest.fixture
def fake_pexels():
    """Provider that answers every query with per_page never-seen photos."""
    counter = {"next": 1}

    def responder(query, per_page, page):
        start = counter["next"]
        counter["next"] += per_page
        return make_pexels_photos(range(start, start + per_page))

    return FakePexelsClient(responder)


@pytest.fixture
def test_settings(catalog_dir):
    from config.settings import get_settings_for_testing
    return get_settings_for_testing(catalog_dir=catalog_dir)


@pytest.fixture
def photo_service(catalog, fake_pexels, recency_cache, test_settings, rng):
    """PhotoService over the temp catalog and the fake provider, synthesis disabled."""
    from photos.search_adapter import SearchAdapter
    from photos.service import PhotoService
    from stylist.keyword_synthesizer import KeywordSynthesizer
    from stylist.recommendation_fetcher import RecommendationFetcher

    return PhotoService(
        catalog=catalog,
        search=SearchAdapter(fake_pexels, recency_cache, rng=rng),
        synthesizer=KeywordSynthesizer(test_settings),
        fetcher=RecommendationFetcher(fake_pexels),
        rng=rng,
    )


def mock_completion(content):
    """OpenAI chat completion response carrying ``content``."""
    from unittest.mock import MagicMock
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app(photo_service):
    """FastAPI application wired to the test PhotoService."""
    from api.app import create_app
    from photos.factory import get_photo_service

    application = create_app(include_static_files=False)
    application.dependency_overrides[get_photo_service] = lambda: photo_service
    return application


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "pexels: marks tests that call the live Pexels API")
    config.addinivalue_line("markers", "openai: marks tests that call the live OpenAI API")


# ============================================================================
# Skip conditions
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Auto-skip tests that need live credentials."""
    skip_pexels = pytest.mark.skip(reason="Pexels tests require PEXELS_API_KEY")
    skip_openai = pytest.mark.skip(reason="OpenAI tests require OPENAI_API_KEY")

    for item in items:
        if "pexels" in item.keywords and not os.getenv("PEXELS_API_KEY"):
            item.add_marker(skip_pexels)
        if "openai" in item.keywords and not os.getenv("OPENAI_API_KEY"):
            item.add_marker(skip_openai)
