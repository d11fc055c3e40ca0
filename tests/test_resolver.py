from __future__ import annotations

from typing import Any

import pytest

from pylazarillo.config import LazarilloConfig
from pylazarillo.resolver import DestinationResolver, parse_destination_answer


class _FakeComplete:
    def __init__(self, answer: str) -> None:
        self._answer = answer
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, _client: object, **kwargs: Any) -> str:
        self.calls.append(kwargs)
        return self._answer


def _resolver() -> DestinationResolver:
    config = LazarilloConfig(openai_api_key="sk-test", google_maps_api_key="maps-test")
    return DestinationResolver(config, client=object())  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("Plaza Urquiza", "Plaza Urquiza"),
        ('"Casa Histórica de Tucumán".', "Casa Histórica de Tucumán"),
        ("  Av. Sarmiento 800\n", "Av. Sarmiento 800"),
        ("NO_DESTINO", None),
        ("no_destino.", None),
        ('"NO_DESTINO"', None),
        ("", None),
    ],
)
def test_parse_destination_answer(answer: str, expected: str | None) -> None:
    assert parse_destination_answer(answer) == expected


@pytest.mark.asyncio
async def test_resolve_prompt_is_scoped_to_the_city(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeComplete("Plaza Urquiza")
    monkeypatch.setattr("pylazarillo.resolver.complete", fake)

    name = await _resolver().resolve("llevame a Plaza Urquiza")

    assert name == "Plaza Urquiza"
    call = fake.calls[0]
    prompt = call["messages"][0]["content"]
    assert "San Miguel de Tucumán, Tucumán, Argentina" in prompt
    assert "NO_DESTINO" in prompt
    assert '"llevame a Plaza Urquiza"' in prompt
    assert call["max_tokens"] == 30
    assert call["service"] == "destination-resolver"


@pytest.mark.asyncio
async def test_resolve_out_of_city_returns_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pylazarillo.resolver.complete", _FakeComplete("NO_DESTINO"))

    assert await _resolver().resolve("llevame al Obelisco de Buenos Aires") is None


@pytest.mark.asyncio
async def test_describe_returns_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeComplete("Es la plaza más antigua de la ciudad.")
    monkeypatch.setattr("pylazarillo.resolver.complete", fake)

    answer = await _resolver().describe("Plaza Urquiza")

    assert answer == "Es la plaza más antigua de la ciudad."
    messages = fake.calls[0]["messages"]
    assert len(messages) == 2
    assert "Plaza Urquiza" in messages[0]["content"]
    assert fake.calls[0]["service"] == "place-describer"
