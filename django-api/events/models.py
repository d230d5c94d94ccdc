"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models


class Event(models.Model):
    """Persistence model for events."""

    class Status(models.TextChoices):
        BUSY = "BUSY"
        SWAPPABLE = "SWAPPABLE"
        SWAP_PENDING = "SWAP_PENDING"
        COMPLETED = "COMPLETED"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="events"
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.BUSY)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["owner", "start_time"], name="event_owner_start_idx"),
            models.Index(fields=["status"], name="event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.start_time} - {self.end_time})"


class Swap(models.Model):
    """Persistence model for swap requests between two events."""

    class Status(models.TextChoices):
        PENDING = "PENDING"
        ACCEPTED = "ACCEPTED"
        REJECTED = "REJECTED"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="outgoing_swaps"
    )
    responder = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="incoming_swaps"
    )
    my_slot = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="+")
    their_slot = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="+")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["my_slot", "their_slot"],
                condition=models.Q(status="PENDING"),
                name="unique_pending_swap_per_pair",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.my_slot_id} <-> {self.their_slot_id} ({self.status})"
