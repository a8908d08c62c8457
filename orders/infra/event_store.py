"""
Event store for order state changes.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from django.db import models

from orders.domain.events import DomainEvent, EventVersion
from orders.infra.models import TimeStampedModel


logger = logging.getLogger(__name__)


class EventStore(TimeStampedModel):
    """Append-only store of domain events."""
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    aggregate_id = models.UUIDField()
    aggregate_type = models.CharField(max_length=50)
    event_type = models.CharField(max_length=100)
    event_version = models.CharField(max_length=10, default=EventVersion.V1.value)
    event_data = models.JSONField()
    sequence_number = models.BigIntegerField()  # per aggregate, starting at 1

    class Meta:
        indexes = [
            models.Index(fields=("aggregate_id", "aggregate_type")),
            models.Index(fields=("aggregate_id", "aggregate_type", "sequence_number")),
        ]
        ordering = ["sequence_number"]


class EventStoreRepository:
    """Repository for event store."""

    def save_event(self, event: DomainEvent, aggregate_type: str) -> None:
        """Append domain event after the aggregate's last one."""
        last_event = (
            EventStore.objects
            .filter(aggregate_id=event.aggregate_id, aggregate_type=aggregate_type)
            .order_by("-sequence_number")
            .first()
        )
        sequence_number = (last_event.sequence_number + 1) if last_event else 1

        EventStore.objects.create(
            aggregate_id=event.aggregate_id,
            aggregate_type=aggregate_type,
            event_type=event.event_type,
            event_version=event.version.value,
            event_data=self._serialize_event(event),
            sequence_number=sequence_number,
        )
        logger.info(
            "event_stored",
            extra={
                "order_id": str(event.aggregate_id),
                "operation": event.event_type,
            },
        )

    def get_events(self, aggregate_id: UUID, aggregate_type: str) -> list[dict]:
        """Get all events for aggregate."""
        events = (
            EventStore.objects
            .filter(aggregate_id=aggregate_id, aggregate_type=aggregate_type)
            .order_by("sequence_number")
        )
        return [self._deserialize_event(e) for e in events]

    def _serialize_event(self, event: DomainEvent) -> dict:
        data = {
            "event_id": str(event.event_id),
            "aggregate_id": str(event.aggregate_id),
            "event_type": event.event_type,
            "version": event.version.value,
            "occurred_at": event.occurred_at,
        }
        for key, value in event.__dict__.items():
            if key in data:
                continue
            if isinstance(value, (UUID, Decimal)):
                data[key] = str(value)
            elif isinstance(value, Enum):
                data[key] = value.value
            else:
                data[key] = value
        return data

    def _deserialize_event(self, event_orm: EventStore) -> dict:
        return {
            "id": str(event_orm.id),
            "aggregate_id": str(event_orm.aggregate_id),
            "event_type": event_orm.event_type,
            "version": event_orm.event_version,
            "data": event_orm.event_data,
            "sequence_number": event_orm.sequence_number,
            "occurred_at": event_orm.event_data.get("occurred_at") or event_orm.created_at.isoformat(),
        }
