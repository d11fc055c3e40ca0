"""Destination extraction and place descriptions backed by a chat model."""

from __future__ import annotations

import logging

import openai

from pylazarillo._api.chat import complete
from pylazarillo._constants import NO_DESTINATION_SENTINEL
from pylazarillo.config import LazarilloConfig

_logger = logging.getLogger(__name__)

_RESOLVE_PROMPT = """Un usuario no vidente está buscando un destino turístico o una dirección en la ciudad de {city}.

El destino solicitado debe ser una ubicación válida dentro de la ciudad. Puede ser:
- Una calle con numeración (Ejemplo: "Av. Sarmiento 800").
- Una intersección de calles (Ejemplo: "Esquina de Av. Mitre y 24 de Septiembre").
- Un lugar puntual conocido dentro de la ciudad (Ejemplo: "Plaza Urquiza", "Casa Histórica de Tucumán").
- Coordenadas dentro de {city}.

Responde únicamente con el nombre del destino, sin explicaciones.
**Importante:** Si el mensaje menciona un lugar fuera de {city}, o si el destino no es claro, responde exactamente con "{sentinel}".

Mensaje: "{utterance}\""""

_DESCRIBE_CONTEXT = "Un usuario no vidente está visitando {place} en {city}."
_DESCRIBE_REQUEST = (
    "Quiere saber más información sobre este lugar. "
    "Proporciónale una respuesta clara, interesante y útil."
)

_QUOTES = "\"'“”«»`"


def parse_destination_answer(answer: str) -> str | None:
    """Turn the model's raw answer into a destination name or ``None``.

    The sentinel is compared case-insensitively and ignoring surrounding
    quotes or a trailing period, which models add inconsistently.
    """
    cleaned = answer.strip().rstrip(".").strip(_QUOTES).rstrip(".").strip()
    if not cleaned or cleaned.upper() == NO_DESTINATION_SENTINEL:
        return None
    return cleaned


class DestinationResolver:
    """Resolve free-form requests to canonical destination names.

    Also answers informational questions about a place, using the same
    model with a different prompt.
    """

    def __init__(self, config: LazarilloConfig, client: openai.AsyncOpenAI) -> None:
        self._config = config
        self._client = client

    async def resolve(self, utterance: str) -> str | None:
        """Return the destination named in *utterance*, or ``None``."""
        prompt = _RESOLVE_PROMPT.format(
            city=self._config.city_context,
            sentinel=NO_DESTINATION_SENTINEL,
            utterance=utterance,
        )
        answer = await complete(
            self._client,
            model=self._config.openai_model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=30,
            service="destination-resolver",
        )
        name = parse_destination_answer(answer)
        if name is None:
            _logger.info("No destination found in %r", utterance)
        return name

    async def describe(self, place: str) -> str:
        """Free-text information about *place* for a visiting user."""
        return await complete(
            self._client,
            model=self._config.openai_model,
            messages=[
                {"role": "user", "content": _DESCRIBE_CONTEXT.format(place=place, city=self._config.city)},
                {"role": "user", "content": _DESCRIBE_REQUEST},
            ],
            max_tokens=1000,
            service="place-describer",
        )
