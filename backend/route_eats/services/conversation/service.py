"""Chat sessions that turn messages into confirmed restaurant searches.

Each session is a two-state machine:

    idle --route wish--> awaiting_confirmation
    awaiting_confirmation --"yes"--> idle (search runs)
    awaiting_confirmation --anything else--> idle (request discarded)

In ``idle`` a message that is not a route wish is answered from the
restaurants the session already found.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from route_eats.models import ConversationContext, Restaurant, RouteRequest, TripPlan
from route_eats.services.ai_reasoning import AIReasoningService
from route_eats.services.restaurant_search import TripPlannerService
from route_eats.utils.cache import LRUCache

logger = logging.getLogger(__name__)

DISCARDED_MESSAGE = "Okay, I won't run that search. Tell me another trip whenever you like."

MAX_SESSIONS = 1000
SESSION_TTL_SECONDS = 6 * 60 * 60


class ConversationState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class ChatReply(BaseModel):
    """Assistant reply; ``plan`` is set when a confirmed search ran."""

    message: str
    state: ConversationState
    pending_request: Optional[RouteRequest] = None
    plan: Optional[TripPlan] = None


class ConversationSession:
    """State and context of one chat."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.state = ConversationState.IDLE
        self.context = ConversationContext()


def is_confirmation(text: str) -> bool:
    """Anything containing "yes", in any case, confirms."""
    return "yes" in (text or "").lower()


def confirmation_prompt(request: RouteRequest) -> str:
    details = []
    if request.stops:
        details.append(f"{request.stops} stops")
    if request.rating:
        details.append(f"rated {request.rating:g}+ stars")
    if request.max_detour_minutes:
        details.append(f"at most {request.max_detour_minutes:g} minutes off the route")
    suffix = f" ({', '.join(details)})" if details else ""
    return (
        f"Should I search for restaurants from {request.origin} to "
        f"{request.destination}{suffix}? Reply yes to confirm."
    )


class ConversationService:
    """Routes chat messages through extraction, confirmation and search."""

    def __init__(
        self,
        assistant: AIReasoningService,
        planner: TripPlannerService,
        sessions: LRUCache[ConversationSession] | None = None,
    ) -> None:
        self._assistant = assistant
        self._planner = planner
        self._sessions: LRUCache[ConversationSession] = (
            sessions if sessions is not None
            else LRUCache(
                max_size=MAX_SESSIONS,
                ttl_seconds=SESSION_TTL_SECONDS,
                normalize_keys=False,
            )
        )

    def get_session(self, session_id: str) -> ConversationSession:
        """Session for ``session_id``, matched exactly; ids differing in case are distinct."""
        session = self._sessions.get(session_id)
        if session is None:
            session = ConversationSession(session_id)
        # re-set on every access so active chats don't expire
        self._sessions.set(session_id, session)
        return session

    async def handle_message(
        self,
        session_id: str,
        text: str,
        origin: str | None = None,
        destination: str | None = None,
        restaurants: list[Restaurant] | None = None,
    ) -> ChatReply:
        """Advance the session by one user message.

        ``origin``, ``destination`` and ``restaurants`` let the client share
        the route it is showing; they replace what the session remembers.

        Raises:
            RouteEatsError: If a confirmed search fails. The pending request
                is discarded either way.
        """
        session = self.get_session(session_id)
        context = session.context
        if origin:
            context.origin = origin
        if destination:
            context.destination = destination
        if restaurants is not None:
            context.restaurants = restaurants

        if session.state == ConversationState.AWAITING_CONFIRMATION:
            return await self._resolve_pending(session, text)

        request = await self._assistant.extract_route_request(text, context)
        if request is not None:
            context.pending_request = request
            session.state = ConversationState.AWAITING_CONFIRMATION
            logger.info(f"[CHAT] {session_id}: awaiting confirmation")
            return ChatReply(
                message=confirmation_prompt(request),
                state=session.state,
                pending_request=request,
            )

        answer = await self._assistant.answer_question(text, context.restaurants)
        return ChatReply(message=answer, state=session.state)

    async def _resolve_pending(self, session: ConversationSession, text: str) -> ChatReply:
        context = session.context
        request = context.pending_request
        context.pending_request = None
        session.state = ConversationState.IDLE

        if request is None or not is_confirmation(text):
            logger.info(f"[CHAT] {session.session_id}: request discarded")
            return ChatReply(message=DISCARDED_MESSAGE, state=session.state)

        logger.info(f"[CHAT] {session.session_id}: confirmed, searching {request.origin} -> {request.destination}")
        plan = await self._planner.plan(
            request.origin, request.destination, request.to_search_options()
        )
        context.origin = request.origin
        context.destination = request.destination
        context.restaurants = plan.restaurants
        return ChatReply(message=plan.message, state=session.state, plan=plan)
