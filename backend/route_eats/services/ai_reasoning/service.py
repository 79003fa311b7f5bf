"""AI reasoning service: Groq (primary) + Gemini (fallback).

Provider-agnostic base class with two concrete implementations:
- GroqReasoningService:   Groq LPU, llama-3.1-8b-instant
- GeminiReasoningService: Google Gemini, gemma-3-4b-it

The model only reads chat text. It drafts a ``RouteRequest`` from a trip
wish, or answers questions about restaurants that were already found. It
never invents places, coordinates, ratings or prices.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from route_eats import config
from route_eats.models import ConversationContext, Restaurant, RouteRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a road-trip assistant that helps drivers find places to eat along "
    "their route. You only work with the trip details the user gives you and the "
    "restaurant data you are shown. Never invent restaurants, addresses, ratings, "
    "prices or opening hours. When asked for JSON, respond ONLY with valid JSON. "
    "No explanations, no markdown, no extra text."
)

FALLBACK_ANSWER = (
    "Sorry, I can't answer that right now. You can still browse the restaurants "
    "on your route, or tell me a new trip to search."
)
NO_RESTAURANTS_ANSWER = (
    "I haven't found any restaurants yet. Tell me where you're driving from and "
    "to, and I'll look for places to eat along the way."
)

# Restaurants summarized in a question prompt
MAX_SUMMARIZED_RESTAURANTS = 30


class AIReasoningService(ABC):
    """Base class for AI reasoning services.

    All prompt construction and JSON parsing lives here.
    Subclasses only implement ``_generate()`` for their specific API client.
    """

    _timeout: float

    @abstractmethod
    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        """Send prompt to the AI provider and return raw text."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name for logging."""
        ...

    # ── Utilities ─────────────────────────────────────────────────────

    @staticmethod
    def _sanitize_input(text: str, max_length: int = 500) -> str:
        """Strip control characters and limit length before prompting."""
        cleaned = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text or "")
        return cleaned[:max_length].strip()

    @staticmethod
    def _extract_json(text: str) -> str:
        if "```json" in text:
            return text.split("```json")[1].split("```")[0].strip()
        if "```" in text:
            return text.split("```")[1].split("```")[0].strip()
        return text

    @staticmethod
    def _optional_number(value: Any, cast: type) -> Any:
        if value is None or value == "":
            return None
        try:
            return cast(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _summarize_restaurant(index: int, restaurant: Restaurant) -> str:
        price = "$" * max(1, int(restaurant.price_level))
        return (
            f"{index}. {restaurant.name} - {restaurant.rating:.1f} stars "
            f"({restaurant.user_rating_count} ratings), {price}, "
            f"{restaurant.distance_from_start / 1000:.1f}km into the route"
            + (f", {restaurant.location.address}" if restaurant.location.address else "")
        )

    # ── Route requests ────────────────────────────────────────────────

    @classmethod
    def parse_route_request(
        cls, data: Any, context: ConversationContext | None = None
    ) -> RouteRequest | None:
        """Build a ``RouteRequest`` from the model's JSON answer.

        Missing endpoints are taken from the current route. Returns None for
        anything that is not a complete new route wish.
        """
        context = context or ConversationContext()
        if not isinstance(data, dict) or data.get("intent") != "route":
            return None

        origin = str(data.get("origin") or context.origin or "").strip() or None
        destination = str(data.get("destination") or context.destination or "").strip() or None
        if not origin or not destination:
            return None

        stops = cls._optional_number(data.get("stops"), int)
        rating = cls._optional_number(data.get("rating"), float)
        detour = cls._optional_number(data.get("max_detour_minutes"), float)

        same_route = origin == context.origin and destination == context.destination
        if same_route and stops is None and rating is None and detour is None:
            return None

        try:
            return RouteRequest(
                origin=origin,
                destination=destination,
                stops=stops or None,
                rating=rating,
                max_detour_minutes=detour,
                needs_confirmation=True,
            )
        except ValidationError as e:
            logger.info(f"[AI] Discarding invalid route request: {e}")
            return None

    async def extract_route_request(
        self, text: str, context: ConversationContext | None = None
    ) -> RouteRequest | None:
        """Draft a route search from chat text, or None if it is not one."""
        context = context or ConversationContext()
        message = self._sanitize_input(text)
        if not message:
            return None

        current = (
            f'Current route: from "{context.origin}" to "{context.destination}"\n'
            if context.origin and context.destination
            else "Current route: none\n"
        )
        prompt = (
            f"Decide whether this message asks to search a (new) driving route for "
            f"restaurants, or is a question about restaurants already found.\n\n"
            f"{current}"
            f'Message: "{message}"\n\n'
            f"Respond ONLY with valid JSON:\n"
            f'{{"intent": "route" or "question", "origin": "start address or null", '
            f'"destination": "end address or null", "stops": number or null, '
            f'"rating": minimum star rating 0-5 or null, '
            f'"max_detour_minutes": number or null}}\n\n'
            f"Rules:\n- Use intent \"route\" only for a trip to search\n"
            f"- Leave origin/destination null if the message does not name them\n"
            f"- Do NOT guess numbers the message does not give"
        )
        try:
            raw = await self._generate(prompt)
            data = json.loads(self._extract_json(raw))
        except asyncio.TimeoutError:
            logger.info(f"[{self.provider_name}] Timeout extracting route request")
            return None
        except Exception as e:
            logger.info(f"[{self.provider_name}] Route request extraction error: {e}")
            return None

        request = self.parse_route_request(data, context)
        if request:
            logger.info(
                f"[AI] Route request: {request.origin} -> {request.destination} "
                f"(stops={request.stops}, rating={request.rating}, "
                f"detour={request.max_detour_minutes})"
            )
        return request

    # ── Questions ─────────────────────────────────────────────────────

    async def answer_question(self, text: str, restaurants: list[Restaurant]) -> str:
        """Answer a question from the restaurants already found."""
        if not restaurants:
            return NO_RESTAURANTS_ANSWER

        question = self._sanitize_input(text)
        summaries = [
            self._summarize_restaurant(i, r)
            for i, r in enumerate(restaurants[:MAX_SUMMARIZED_RESTAURANTS], 1)
        ]
        prompt = (
            f"Restaurants along the user's route, in driving order:\n"
            f"{chr(10).join(summaries)}\n\n"
            f'Question: "{question}"\n\n'
            f"Answer in 2-4 friendly sentences using only the restaurants above. "
            f"If they don't answer the question, say so."
        )
        try:
            answer = await self._generate(prompt)
        except Exception as e:
            logger.info(f"[{self.provider_name}] Question answering error: {e}")
            return FALLBACK_ANSWER
        return answer or FALLBACK_ANSWER


# ═══════════════════════════════════════════════════════════════════════
# Provider: Groq  (primary)
# ═══════════════════════════════════════════════════════════════════════

class GroqReasoningService(AIReasoningService):
    """Groq LPU with Llama 3.1 8B Instant."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        from groq import AsyncGroq

        self._api_key = api_key or config.GROQ_API_KEY
        if not self._api_key:
            raise ValueError("GROQ_API_KEY not provided")
        self._client = AsyncGroq(api_key=self._api_key)
        self._model_name = model_name or config.GROQ_MODEL
        self._timeout = timeout_seconds
        logger.info(f"[AI] Groq ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Groq"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=0.2,
                    max_tokens=1024,
                ),
                timeout=t,
            )
            return (resp.choices[0].message.content or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Groq] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Groq] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Provider: Gemini  (fallback)
# ═══════════════════════════════════════════════════════════════════════

class GeminiReasoningService(AIReasoningService):
    """Google Gemini with Gemma 3 4B."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        from google import genai

        self._api_key = api_key or config.GEMINI_API_KEY
        if not self._api_key:
            raise ValueError("GEMINI_API_KEY not provided")
        self._client = genai.Client(api_key=self._api_key)
        self._model_name = model_name or config.GEMINI_MODEL
        self._timeout = timeout_seconds
        logger.info(f"[AI] Gemini ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Gemini"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        t = timeout or self._timeout
        try:
            # Gemma has no system role; prepend it
            full_prompt = f"{SYSTEM_PROMPT}\n\n{prompt}"
            resp = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=full_prompt,
                ),
                timeout=t,
            )
            return (resp.text or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Gemini] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Gemini] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Factory: Groq → Gemini
# ═══════════════════════════════════════════════════════════════════════

def create_ai_service() -> AIReasoningService:
    """Create the best available AI service.  Groq first, Gemini fallback."""
    if config.GROQ_API_KEY:
        try:
            return GroqReasoningService()
        except Exception as e:
            logger.info(f"[AI] Groq init failed: {e}")

    if config.GEMINI_API_KEY:
        try:
            return GeminiReasoningService()
        except Exception as e:
            logger.info(f"[AI] Gemini init failed: {e}")

    raise ValueError("No AI provider available. Set GROQ_API_KEY or GEMINI_API_KEY in .env")
