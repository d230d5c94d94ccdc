from django.urls import path

from events.handlers import (
    AllEventsView,
    DisableSwapView,
    EnableSwapView,
    EventDetailView,
    EventListView,
    IncomingSwapsView,
    OutgoingSwapsView,
    SwappableEventsView,
    SwapRequestView,
    SwapRespondView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/all", AllEventsView.as_view(), name="event-list-all"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/enable-swap",
        EnableSwapView.as_view(),
        name="event-enable-swap",
    ),
    path(
        "events/<str:event_id>/disable-swap",
        DisableSwapView.as_view(),
        name="event-disable-swap",
    ),
    path("swaps", SwapRequestView.as_view(), name="swap-request"),
    path("swaps/swappable-slots", SwappableEventsView.as_view(), name="swappable-events"),
    path("swaps/incoming", IncomingSwapsView.as_view(), name="swap-incoming"),
    path("swaps/outgoing", OutgoingSwapsView.as_view(), name="swap-outgoing"),
    path("swaps/<str:swap_id>/respond", SwapRespondView.as_view(), name="swap-respond"),
]
