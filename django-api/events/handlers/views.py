"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.domain import UserId
from events.handlers.serializers import (
    EventInputSerializer,
    EventSerializer,
    SwapRequestSerializer,
    SwapResponseSerializer,
    SwapSerializer,
)
from events.services.event_service import EventService
from events.services.swap_service import SwapService
from events.stores.django_store import DjangoEventStore, DjangoSwapStore


def event_service() -> EventService:
    return EventService(DjangoEventStore(), DjangoSwapStore())


def swap_service() -> SwapService:
    return SwapService(DjangoEventStore(), DjangoSwapStore())


def caller(request: Request) -> UserId:
    return UserId(request.user.id)


def parse(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    def get(self, request: Request) -> Response:
        events = event_service().list_own_events(caller(request))
        return Response(EventSerializer(events, many=True).data)

    def post(self, request: Request) -> Response:
        data = parse(EventInputSerializer, request)
        event = event_service().create_event(
            caller(request),
            title=data.get("title"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
        )
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class AllEventsView(APIView):
    """Handler for GET /api/events/all"""

    def get(self, request: Request) -> Response:
        events = event_service().list_all_events()
        return Response(EventSerializer(events, many=True).data)


class EventDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        event = event_service().get_event(event_id, caller(request))
        return Response(EventSerializer(event).data)

    def patch(self, request: Request, event_id: str) -> Response:
        data = parse(EventInputSerializer, request)
        event = event_service().update_event(event_id, caller(request), **data)
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        event = event_service().delete_event(event_id, caller(request))
        return Response(EventSerializer(event).data)


class EnableSwapView(APIView):
    """Handler for POST /api/events/{event_id}/enable-swap"""

    def post(self, request: Request, event_id: str) -> Response:
        event = event_service().enable_swap(event_id, caller(request))
        return Response(EventSerializer(event).data)


class DisableSwapView(APIView):
    """Handler for POST /api/events/{event_id}/disable-swap"""

    def post(self, request: Request, event_id: str) -> Response:
        event = event_service().disable_swap(event_id, caller(request))
        return Response(EventSerializer(event).data)


class SwappableEventsView(APIView):
    """Handler for GET /api/swaps/swappable-slots"""

    def get(self, request: Request) -> Response:
        events = swap_service().list_swappable_for_others(caller(request))
        return Response(EventSerializer(events, many=True).data)


class SwapRequestView(APIView):
    """Handler for POST /api/swaps"""

    def post(self, request: Request) -> Response:
        data = parse(SwapRequestSerializer, request)
        swap = swap_service().request_swap(
            caller(request), data.get("event_id"), data.get("target_event_id")
        )
        return Response(SwapSerializer(swap).data, status=status.HTTP_201_CREATED)


class SwapRespondView(APIView):
    """Handler for POST /api/swaps/{swap_id}/respond"""

    def post(self, request: Request, swap_id: str) -> Response:
        data = parse(SwapResponseSerializer, request)
        swap = swap_service().respond_swap(caller(request), swap_id, data.get("accept"))
        return Response(SwapSerializer(swap).data)


class IncomingSwapsView(APIView):
    """Handler for GET /api/swaps/incoming"""

    def get(self, request: Request) -> Response:
        swaps = swap_service().list_incoming(caller(request))
        return Response(SwapSerializer(swaps, many=True).data)


class OutgoingSwapsView(APIView):
    """Handler for GET /api/swaps/outgoing"""

    def get(self, request: Request) -> Response:
        swaps = swap_service().list_outgoing(caller(request))
        return Response(SwapSerializer(swaps, many=True).data)
