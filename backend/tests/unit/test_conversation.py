"""Unit tests for the chat confirmation state machine."""

import pytest

from route_eats.exceptions import NoRouteFoundError
from route_eats.models import Location, RouteRequest, TripPlan
from route_eats.services.conversation import (
    ConversationService,
    ConversationState,
    confirmation_prompt,
    is_confirmation,
)


class FakeAssistant:
    """Treats messages containing " to " as route wishes."""

    def __init__(self) -> None:
        self.contexts = []
        self.questions: list[str] = []

    async def extract_route_request(self, text, context=None):
        self.contexts.append(context)
        if " to " not in text:
            return None
        origin, destination = text.split(" to ", 1)
        return RouteRequest(origin=origin, destination=destination, rating=4.0)

    async def answer_question(self, text, restaurants):
        self.questions.append(text)
        return f"{len(restaurants)} restaurants known"


class FakePlanner:
    def __init__(self, plan: TripPlan | None = None, error: Exception | None = None) -> None:
        self.plan_result = plan
        self.error = error
        self.calls = []

    async def plan(self, origin, destination, options):
        self.calls.append((origin, destination, options))
        if self.error:
            raise self.error
        return self.plan_result


@pytest.fixture
def trip_plan(make_route, make_restaurant) -> TripPlan:
    return TripPlan(
        origin=Location(lat=0, lng=0, address="Austin"),
        destination=Location(lat=0.07, lng=0, address="Dallas"),
        route=make_route(8),
        restaurants=[make_restaurant("a"), make_restaurant("b")],
        message="Found 2 restaurants rated 4+ stars along your route.",
    )


class TestConfirmationHelpers:
    """Tests for confirmation matching and prompts."""

    @pytest.mark.parametrize("text", ["yes", "YES", "Yes please", "oh yes!", "yesss"])
    def test_confirmations(self, text: str) -> None:
        assert is_confirmation(text)

    @pytest.mark.parametrize("text", ["no", "nope", "y", "sure", ""])
    def test_non_confirmations(self, text: str) -> None:
        assert not is_confirmation(text)

    def test_prompt_mentions_filters(self) -> None:
        prompt = confirmation_prompt(
            RouteRequest(origin="A", destination="B", stops=3, rating=4.5, max_detour_minutes=10)
        )
        assert "from A to B" in prompt
        assert "3 stops" in prompt
        assert "4.5+" in prompt
        assert "10 minutes" in prompt


class TestConversationService:
    """Tests for message handling across states."""

    @pytest.mark.asyncio
    async def test_route_wish_awaits_confirmation(self, trip_plan) -> None:
        planner = FakePlanner(trip_plan)
        service = ConversationService(FakeAssistant(), planner)

        reply = await service.handle_message("s1", "Austin to Dallas")

        assert reply.state == ConversationState.AWAITING_CONFIRMATION
        assert reply.pending_request.origin == "Austin"
        assert "Reply yes" in reply.message
        assert planner.calls == []

    @pytest.mark.asyncio
    async def test_yes_runs_search(self, trip_plan) -> None:
        planner = FakePlanner(trip_plan)
        service = ConversationService(FakeAssistant(), planner)
        await service.handle_message("s1", "Austin to Dallas")

        reply = await service.handle_message("s1", "Yes, go ahead")

        assert reply.state == ConversationState.IDLE
        assert reply.plan == trip_plan
        assert reply.message == trip_plan.message
        origin, destination, options = planner.calls[0]
        assert (origin, destination) == ("Austin", "Dallas")
        assert options.min_rating == 4.0

        session = service.get_session("s1")
        assert session.context.pending_request is None
        assert [r.id for r in session.context.restaurants] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_anything_else_discards(self, trip_plan) -> None:
        planner = FakePlanner(trip_plan)
        service = ConversationService(FakeAssistant(), planner)
        await service.handle_message("s1", "Austin to Dallas")

        reply = await service.handle_message("s1", "actually, Austin to Houston")

        assert reply.state == ConversationState.IDLE
        assert reply.plan is None
        assert planner.calls == []
        assert service.get_session("s1").context.pending_request is None

    @pytest.mark.asyncio
    async def test_question_is_answered(self, make_restaurant) -> None:
        assistant = FakeAssistant()
        service = ConversationService(assistant, FakePlanner())

        reply = await service.handle_message(
            "s1", "Which one has pie?", restaurants=[make_restaurant("a")]
        )

        assert reply.state == ConversationState.IDLE
        assert reply.message == "1 restaurants known"
        assert assistant.questions == ["Which one has pie?"]

    @pytest.mark.asyncio
    async def test_client_route_is_shared_with_extractor(self) -> None:
        assistant = FakeAssistant()
        service = ConversationService(assistant, FakePlanner())
        await service.handle_message("s1", "hello", origin="Austin", destination="Dallas")
        assert assistant.contexts[0].origin == "Austin"
        assert assistant.contexts[0].destination == "Dallas"

    @pytest.mark.asyncio
    async def test_failed_search_returns_to_idle(self) -> None:
        service = ConversationService(FakeAssistant(), FakePlanner(error=NoRouteFoundError("none")))
        await service.handle_message("s1", "Austin to Honolulu")

        with pytest.raises(NoRouteFoundError):
            await service.handle_message("s1", "yes")

        session = service.get_session("s1")
        assert session.state == ConversationState.IDLE
        assert session.context.pending_request is None

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, trip_plan) -> None:
        service = ConversationService(FakeAssistant(), FakePlanner(trip_plan))
        await service.handle_message("s1", "Austin to Dallas")

        reply = await service.handle_message("s2", "yes")

        assert reply.state == ConversationState.IDLE
        assert reply.plan is None
        assert service.get_session("s1").state == ConversationState.AWAITING_CONFIRMATION

    @pytest.mark.asyncio
    async def test_session_ids_are_case_sensitive(self, trip_plan) -> None:
        service = ConversationService(FakeAssistant(), FakePlanner(trip_plan))
        await service.handle_message("abc", "Austin to Dallas")

        reply = await service.handle_message("ABC", "yes")

        assert reply.plan is None
        assert service.get_session("abc").state == ConversationState.AWAITING_CONFIRMATION
