"""
Unit tests for ratio splitting and source mixing.
"""

import pytest

from conftest import FakePexelsClient
from core.errors import MissingCredentialError, UpstreamError
from core.utils import split_by_ratio
from photos.catalog import CatalogFilter
from photos.mixer import RatioMixer
from photos.models import Audience, PhotoSource
from photos.recency_cache import RecencyCache
from photos.search_adapter import SearchAdapter


def _failing(error):
    def responder(query, per_page, page):
        raise error
    return responder


class TestSplitByRatio:

    @pytest.mark.parametrize("total", [10, 30])
    @pytest.mark.parametrize("ratio", [0, 1, 15, 25, 33, 50, 67, 75, 99, 100])
    def test_parts_sum_to_total(self, total, ratio):
        remote, local = split_by_ratio(total, ratio)
        assert remote + local == total
        assert remote >= 0 and local >= 0

    @pytest.mark.parametrize("total,ratio,expected", [
        (30, 30, (9, 21)),
        (30, 50, (15, 15)),
        (10, 25, (3, 7)),    # 2.5 rounds up
        (10, 15, (2, 8)),    # 1.5 rounds up
        (30, 0, (0, 30)),
        (30, 100, (30, 0)),
    ])
    def test_half_up_rounding(self, total, ratio, expected):
        assert split_by_ratio(total, ratio) == expected

    @pytest.mark.parametrize("ratio", [-1, 101])
    def test_out_of_range_rejected(self, ratio):
        with pytest.raises(ValueError):
            split_by_ratio(30, ratio)


@pytest.fixture
def make_mixer(catalog, rng):
    def _make(client):
        return RatioMixer(catalog, SearchAdapter(client, RecencyCache(), rng=rng), rng=rng)
    return _make


class TestRatioMixer:

    def test_ratio_zero_never_calls_provider(self, make_mixer, fake_pexels):
        mixer = make_mixer(fake_pexels)
        photos = mixer.mix(Audience.FEMALE, 0, 10)

        assert fake_pexels.calls == []
        assert len(photos) == 10
        assert all(p.source is PhotoSource.LOCAL for p in photos)

    def test_mixed_ratio_split(self, make_mixer, fake_pexels, catalog_dir):
        # Enough local files for a 30-photo batch
        for i in range(20):
            (catalog_dir / f"ladies_extra_{i:02d}.jpg").write_bytes(b"\xff")
        mixer = make_mixer(fake_pexels)

        photos = mixer.mix(Audience.FEMALE, 30, 30)

        remote = [p for p in photos if p.source is PhotoSource.PEXELS]
        local = [p for p in photos if p.source is PhotoSource.LOCAL]
        assert len(remote) == 9
        assert len(local) == 21
        assert len({p.id for p in photos}) == 30

    def test_ratio_100_is_provider_only(self, make_mixer, fake_pexels):
        photos = make_mixer(fake_pexels).mix(Audience.MALE, 100, 30)
        assert len(photos) == 30
        assert all(p.source is PhotoSource.PEXELS for p in photos)

    def test_ratio_100_failure_propagates(self, make_mixer):
        mixer = make_mixer(FakePexelsClient(_failing(UpstreamError("down", status_code=502))))
        with pytest.raises(UpstreamError) as exc_info:
            mixer.mix(Audience.FEMALE, 100, 30)
        assert exc_info.value.http_status == 502

    def test_ratio_100_missing_key_propagates(self, make_mixer):
        mixer = make_mixer(FakePexelsClient(_failing(MissingCredentialError("no key"))))
        with pytest.raises(MissingCredentialError):
            mixer.mix(Audience.FEMALE, 100, 30)

    def test_ratio_50_failure_falls_back_to_local(self, make_mixer):
        """Provider down at a mixed ratio: the whole batch comes from the catalog."""
        mixer = make_mixer(FakePexelsClient(_failing(UpstreamError("down", status_code=500))))

        photos = mixer.mix(Audience.FEMALE, 50, 10)

        assert len(photos) == 10
        assert all(p.source is PhotoSource.LOCAL for p in photos)

    def test_local_shortfall_returns_fewer(self, make_mixer, fake_pexels):
        # 14 female catalog photos, 21 requested locally
        photos = make_mixer(fake_pexels).mix(Audience.FEMALE, 30, 30)
        assert len(photos) == 9 + 14

    def test_missing_catalog_contributes_nothing(self, tmp_path, fake_pexels, rng):
        catalog = CatalogFilter(tmp_path / "missing", rng=rng)
        mixer = RatioMixer(catalog, SearchAdapter(fake_pexels, RecencyCache(), rng=rng), rng=rng)

        assert mixer.mix(Audience.MALE, 0, 30) == []
        photos = mixer.mix(Audience.MALE, 30, 30)
        assert len(photos) == 9
        assert all(p.source is PhotoSource.PEXELS for p in photos)

    def test_local_ids_negative_remote_positive(self, make_mixer, fake_pexels):
        photos = make_mixer(fake_pexels).mix(Audience.MALE, 50, 20)
        for photo in photos:
            if photo.source is PhotoSource.LOCAL:
                assert photo.id < 0
            else:
                assert photo.id > 0

    def test_invalid_ratio(self, make_mixer, fake_pexels):
        with pytest.raises(ValueError):
            make_mixer(fake_pexels).mix(Audience.MALE, 150, 30)
