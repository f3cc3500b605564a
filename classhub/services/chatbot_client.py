"""
Chatbot Client
Forwards a user's question to the Gemini generateContent API and extracts
the first candidate's text.
"""

import logging

import httpx

from classhub.core.config import settings

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't generate a response."


class ChatbotError(Exception):
    pass


def _endpoint() -> str:
    return f"{settings.GEMINI_API_URL.rstrip('/')}/{settings.GEMINI_MODEL}:generateContent"


def extract_reply(data: dict) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a generateContent
    response, falling back to a canned reply when any level is missing.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return FALLBACK_REPLY
    return text or FALLBACK_REPLY


async def ask(message: str) -> str:
    if not settings.GEMINI_API_KEY:
        raise ChatbotError("GEMINI_API_KEY is not configured")

    payload = {"contents": [{"role": "user", "parts": [{"text": message}]}]}
    try:
        async with httpx.AsyncClient(timeout=settings.GEMINI_TIMEOUT_SECONDS) as client:
            response = await client.post(
                _endpoint(),
                params={"key": settings.GEMINI_API_KEY},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise ChatbotError(str(e)) from e

    return extract_reply(data)
