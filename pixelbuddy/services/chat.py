"""Talk to a pet through a local Ollama server.

The LLM is optional: any failure to reach it is turned into a canned reply
picked from the pet's mood, so callers never see an error for it.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

import httpx

from pixelbuddy.domain.pet_rules import build_chat_prompt, fallback_response, validate_message
from pixelbuddy.exceptions import ExternalServiceUnavailable
from pixelbuddy.load_secrets import ollama_model, ollama_timeout, ollama_url
from pixelbuddy.models.dc_models import TalkResponseModel
from pixelbuddy.services import pet_db


async def generate_reply(
    prompt: str,
    *,
    base_url: str = ollama_url,
    model: str = ollama_model,
    timeout: float = ollama_timeout,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Ask Ollama for a non-streamed completion

    Args:
        prompt (str): Full prompt text
        base_url (str): Ollama root URL, e.g. http://localhost:11434
        model (str): Ollama model tag
        timeout (float): Seconds before giving up on the request
        transport (Optional[httpx.AsyncBaseTransport]): Override for tests

    Raises:
        ExternalServiceUnavailable: Unreachable, timed out, HTTP error or bad payload

    Returns:
        str: The model's response text
    """
    url = base_url.rstrip("/") + "/api/generate"
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            # httpx times each phase separately; wait_for caps the whole call.
            response = await asyncio.wait_for(
                client.post(url, json={"model": model, "prompt": prompt, "stream": False}),
                timeout,
            )
            response.raise_for_status()
            data = response.json()
    except asyncio.TimeoutError as e:
        raise ExternalServiceUnavailable(f"Ollama did not answer within {timeout}s") from e
    except (httpx.HTTPError, ValueError) as e:
        raise ExternalServiceUnavailable(f"Ollama request failed: {e}") from e

    reply = data.get("response") if isinstance(data, dict) else None
    if not isinstance(reply, str) or not reply.strip():
        raise ExternalServiceUnavailable("Ollama returned an empty response")
    return reply.strip()


async def talk_to_pet(pet_id: UUID, message: str) -> TalkResponseModel:
    """Answer the owner in character, falling back to a canned line

    Raises:
        ValidationError: Empty or too long message
        NotFound: The pet does not exist
    """
    message = validate_message(message)
    pet, memories = await pet_db.read_chat_context(pet_id)
    stats = pet.model_dump(include={"hunger", "happiness", "energy", "hygiene"})
    prompt = build_chat_prompt(pet.name, stats, memories, message)

    try:
        reply = await generate_reply(prompt)
    except ExternalServiceUnavailable as e:
        logging.warning(f"Ollama not available, using fallback response: {e.message}")
        return TalkResponseModel(response=fallback_response(pet.name, stats), fallback=True)

    await pet_db.record_conversation(pet, message, reply, ollama_model)
    return TalkResponseModel(response=reply, fallback=False)
