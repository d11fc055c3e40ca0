"""Chat-completions calls shared by the resolver, translator and describer."""

from __future__ import annotations

import logging
from typing import Any

import openai

from pylazarillo.exceptions import ExternalServiceError, ExternalServiceTimeout

_logger = logging.getLogger(__name__)


async def complete(
    client: openai.AsyncOpenAI,
    *,
    model: str,
    messages: list[dict[str, Any]],
    max_tokens: int,
    service: str,
) -> str:
    """Run one chat completion and return the stripped text of the first choice.

    Provider failures are mapped onto the pylazarillo hierarchy so callers
    only have to handle :class:`ExternalServiceError`.
    """
    try:
        completion = await client.chat.completions.create(
            model=model,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=max_tokens,
        )
    except openai.APITimeoutError as exc:
        raise ExternalServiceTimeout(f"{service} timed out", service=service) from exc
    except openai.APIStatusError as exc:
        raise ExternalServiceError(
            f"{service} failed: HTTP {exc.status_code}",
            service=service,
            code=str(exc.status_code),
        ) from exc
    except openai.OpenAIError as exc:
        raise ExternalServiceError(f"{service} failed: {exc}", service=service) from exc

    if not completion.choices:
        raise ExternalServiceError(f"{service} returned no choices", service=service)
    content = completion.choices[0].message.content
    if not content or not content.strip():
        raise ExternalServiceError(f"{service} returned an empty answer", service=service)

    _logger.debug("%s answered %d chars", service, len(content))
    return content.strip()
