"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from block_converter.oembed import ProviderMetadata
from block_converter.rules import clear_tag_rules


@pytest.fixture(autouse=True)
def _clean_tag_rules():
    clear_tag_rules()
    yield
    clear_tag_rules()


class FakeOEmbed:
    """Records requested URLs and answers from a fixed table."""

    def __init__(self, responses: dict[str, ProviderMetadata] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[str] = []

    def __call__(self, url: str) -> ProviderMetadata | None:
        self.calls.append(url)
        return self.responses.get(url)


class RecordingResolver:
    """Media resolver that maps every source onto a fixed CDN prefix."""

    def __init__(self, prefix: str = "https://cdn.example.com/uploads/") -> None:
        self.prefix = prefix
        self.calls: list[tuple[str, str]] = []

    def resolve(self, src: str, alt: str) -> str:
        self.calls.append((src, alt))
        return self.prefix + src.rsplit("/", 1)[-1]


@pytest.fixture
def fake_oembed() -> Callable[..., FakeOEmbed]:
    def _make(responses: dict[str, dict] | None = None) -> FakeOEmbed:
        validated = {
            url: ProviderMetadata.model_validate(data)
            for url, data in (responses or {}).items()
        }
        return FakeOEmbed(validated)

    return _make


@pytest.fixture
def recording_resolver() -> RecordingResolver:
    return RecordingResolver()
