"""
Base Domain Classes

This module provides the foundational building blocks for Domain-Driven Design:
- Entity: Objects with unique identity
- ValueObject: Immutable objects compared by value
- Aggregate: Consistency boundaries
- DomainEvent: Immutable snapshots of something that happened

Aggregates in this code base are immutable: a state change is expressed
by building a new instance, so events are derived from the resulting
aggregate instead of being collected on it.
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True, eq=False)
class Entity(ABC):
    """
    Base class for all entities

    Entities have unique identity.
    Two entities are equal if their IDs are equal.
    """
    id: str

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True, eq=False)
class Aggregate(Entity):
    """
    Base class for aggregate roots

    Aggregates are the consistency boundaries in DDD. They validate every
    invariant when constructed and are never mutated afterwards.
    """


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


def _to_primitive(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are flat snapshots handed to collaborators outside the core.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: str | None = None

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        """Convert event to a JSON-safe dictionary for dispatch"""
        payload = {'event_type': self.event_type}
        for item in fields(self):
            payload[item.name] = _to_primitive(getattr(self, item.name))
        return payload
