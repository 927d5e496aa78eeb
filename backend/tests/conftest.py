"""Shared test fixtures: a controllable clock and a fake search provider."""

import pytest

from muzik.models import Video
from muzik.services import SearchProvider


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_videos(count: int, prefix: str = "vid") -> list[Video]:
    return [
        Video(
            video_id=f"{prefix}{i}",
            title=f"Video {i}",
            description="",
            thumbnail=f"https://i.ytimg.com/vi/{prefix}{i}/mqdefault.jpg",
            channel_title="Channel",
            published_at="2024-01-01T00:00:00Z",
        )
        for i in range(count)
    ]


class FakeProvider(SearchProvider):
    """Records calls; returns canned videos or raises queued errors."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self.errors: list[Exception] = []

    async def search(self, query: str, max_results: int) -> list[Video]:
        self.calls.append((query, max_results))
        if self.errors:
            raise self.errors.pop(0)
        return make_videos(max_results)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=1000.0)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
