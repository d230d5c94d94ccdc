from events.handlers.views import (
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

__all__ = [
    "AllEventsView",
    "DisableSwapView",
    "EnableSwapView",
    "EventDetailView",
    "EventListView",
    "IncomingSwapsView",
    "OutgoingSwapsView",
    "SwappableEventsView",
    "SwapRequestView",
    "SwapRespondView",
]
