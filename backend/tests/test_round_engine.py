"""Tests for the single-round state machine."""

import asyncio

import pytest

from geoguesser.models.landmark import Difficulty, Landmark
from geoguesser.services.landmarks import LandmarkCatalog
from geoguesser.services.round_engine import RoundEngine, RoundPhase

from conftest import GRANT_HALL, RecordingListener, offset_north


class StubImageProvider:
    def __init__(self, url: str = "https://images.test/photo.jpg", fail: bool = False) -> None:
        self.url = url
        self.fail = fail
        self.requested = []
        self.release = asyncio.Event()

    async def load_image(self, landmark: Landmark) -> str:
        self.requested.append(landmark.id)
        await self.release.wait()
        if self.fail:
            raise RuntimeError("image service down")
        return self.url


@pytest.fixture
def engine(single_catalog: LandmarkCatalog, listener: RecordingListener) -> RoundEngine:
    return RoundEngine(single_catalog, listener=listener)


class TestRoundLifecycle:

    def test_starts_awaiting_landmark(self, engine: RoundEngine) -> None:
        assert engine.phase == RoundPhase.AWAITING_LANDMARK
        assert engine.landmark is None

    def test_start_round_presents_landmark(self, engine: RoundEngine) -> None:
        landmark = engine.start_round(Difficulty.EASY)
        assert landmark.id == "grant-hall-1"
        assert engine.phase == RoundPhase.PRESENTED
        assert engine.hints_used == 0

    def test_exact_guess_scores_maximum(self, engine: RoundEngine, listener: RecordingListener) -> None:
        engine.start_round()
        outcome = engine.submit_guess(*GRANT_HALL)

        assert outcome.distance_m == 0
        assert outcome.score == 5000
        assert outcome.guess.lat == GRANT_HALL[0]
        assert not outcome.skipped
        assert engine.phase == RoundPhase.RESOLVED
        assert listener.events[-1] == ("guess_resolved", (0.0, 5000, outcome.landmark))

    def test_guess_600m_away(self, engine: RoundEngine) -> None:
        engine.start_round()
        outcome = engine.submit_guess(*offset_north(GRANT_HALL, 600))
        assert outcome.distance_m == pytest.approx(600, abs=0.5)
        assert outcome.score == 700

    def test_skip_round(self, engine: RoundEngine, listener: RecordingListener) -> None:
        landmark = engine.start_round()
        engine.request_hint()
        outcome = engine.skip_round()

        assert outcome.skipped
        assert outcome.guess is None
        assert outcome.distance_m is None
        assert outcome.score == 0
        assert outcome.hints_used == 1
        assert engine.phase == RoundPhase.RESOLVED
        assert listener.events[-1] == ("round_skipped", (landmark,))

    def test_new_round_resets_hints(self, engine: RoundEngine) -> None:
        engine.start_round()
        engine.request_hint()
        engine.submit_guess(*GRANT_HALL)
        engine.start_round()
        assert engine.hints_used == 0
        assert engine.submit_guess(*GRANT_HALL).score == 5000

    def test_discard(self, engine: RoundEngine) -> None:
        engine.start_round()
        engine.discard()
        assert engine.phase == RoundPhase.AWAITING_LANDMARK
        assert engine.submit_guess(*GRANT_HALL) is None


class TestHints:

    def test_hints_revealed_in_order(self, engine: RoundEngine, listener: RecordingListener) -> None:
        engine.start_round()
        first = engine.request_hint()
        second = engine.request_hint()

        assert (first.text, first.index, first.total) == ("Clock tower", 1, 2)
        assert (second.text, second.index, second.total) == ("Houses the archives", 2, 2)
        assert listener.events[-1] == ("hint_revealed", ("Houses the archives", 2, 2))

    def test_hints_never_exceed_list(self, engine: RoundEngine) -> None:
        engine.start_round()
        engine.request_hint()
        engine.request_hint()
        assert engine.request_hint() is None
        assert engine.hints_used == 2

    def test_one_hint_costs_100(self, engine: RoundEngine) -> None:
        engine.start_round()
        engine.request_hint()
        outcome = engine.submit_guess(*GRANT_HALL)
        assert outcome.score == 4900
        assert outcome.hints_used == 1

    def test_penalty_per_hint(self, catalog: LandmarkCatalog) -> None:
        engine = RoundEngine(catalog)
        for hints in range(4):
            landmark = engine.start_round()
            for _ in range(hints):
                engine.request_hint()
            outcome = engine.submit_guess(*offset_north((landmark.lat, landmark.lon), 300))
            assert outcome.score == 1700 - 100 * hints

    def test_score_floored_at_zero(self, single_catalog: LandmarkCatalog) -> None:
        engine = RoundEngine(single_catalog, hint_penalty=1000)
        engine.start_round()
        engine.request_hint()
        # 1800m away is worth 100 points before the penalty
        outcome = engine.submit_guess(*offset_north(GRANT_HALL, 1800))
        assert outcome.score == 0


class TestGuards:

    def test_hint_without_round(self, engine: RoundEngine) -> None:
        assert engine.request_hint() is None

    def test_guess_without_round(self, engine: RoundEngine) -> None:
        assert engine.submit_guess(*GRANT_HALL) is None

    def test_skip_without_round(self, engine: RoundEngine) -> None:
        assert engine.skip_round() is None

    @pytest.mark.parametrize("lat, lon", [
        (float("nan"), float("nan")),
        (float("nan"), GRANT_HALL[1]),
        (float("inf"), GRANT_HALL[1]),
        (GRANT_HALL[0], float("-inf")),
    ])
    def test_non_finite_guess_ignored(self, engine: RoundEngine, listener: RecordingListener,
                                      lat: float, lon: float) -> None:
        engine.start_round()
        event_count = len(listener.events)

        assert engine.submit_guess(lat, lon) is None
        assert engine.phase == RoundPhase.PRESENTED
        assert len(listener.events) == event_count

        # The round can still be played normally
        assert engine.submit_guess(*GRANT_HALL).score == 5000

    def test_calls_after_resolution_ignored(self, engine: RoundEngine, listener: RecordingListener) -> None:
        engine.start_round()
        engine.submit_guess(*GRANT_HALL)
        event_count = len(listener.events)

        assert engine.request_hint() is None
        assert engine.submit_guess(*GRANT_HALL) is None
        assert engine.skip_round() is None
        assert len(listener.events) == event_count


class TestPhotos:

    @pytest.mark.anyio
    async def test_photo_loads_without_blocking_hints(self, single_catalog: LandmarkCatalog,
                                                      listener: RecordingListener) -> None:
        provider = StubImageProvider()
        engine = RoundEngine(single_catalog, listener=listener, image_provider=provider)

        landmark = engine.start_round()
        # Hint accepted while the photo is still loading
        assert engine.request_hint() is not None
        assert engine.photo_url is None

        provider.release.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert engine.photo_url == "https://images.test/photo.jpg"
        assert ("photo_ready", ("https://images.test/photo.jpg", landmark)) in listener.events

    @pytest.mark.anyio
    async def test_provider_failure_uses_placeholder(self, single_catalog: LandmarkCatalog) -> None:
        provider = StubImageProvider(fail=True)
        engine = RoundEngine(single_catalog, image_provider=provider)

        engine.start_round()
        provider.release.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert engine.photo_url.startswith("data:image/svg+xml;base64,")

    @pytest.mark.anyio
    async def test_discard_cancels_photo(self, single_catalog: LandmarkCatalog,
                                         listener: RecordingListener) -> None:
        provider = StubImageProvider()
        engine = RoundEngine(single_catalog, listener=listener, image_provider=provider)

        engine.start_round()
        await asyncio.sleep(0)
        engine.discard()
        provider.release.set()
        await asyncio.sleep(0)

        assert engine.photo_url is None
        assert "photo_ready" not in listener.names()
