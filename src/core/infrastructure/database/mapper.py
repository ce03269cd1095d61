"""Base mapper for entity-model conversion."""

from abc import ABC, abstractmethod
from typing import TypeVar

E = TypeVar("E")  # Entity type
M = TypeVar("M")  # Model type


class BaseMapper[E, M](ABC):
    """Base mapper for converting between domain entities and database models."""

    @abstractmethod
    def to_domain(self, model: M) -> E:
        """Convert database model to domain entity."""
        pass

    @abstractmethod
    def to_model(self, entity: E) -> M:
        """Convert domain entity to database model."""
        pass

    def to_domain_list(self, models: list[M]) -> list[E]:
        return [self.to_domain(model) for model in models]

    def copy_to_model(
        self, entity: E, model: M, *, exclude: frozenset[str] = frozenset()
    ) -> M:
        """Copy mutable entity fields onto an already-loaded model.

        ``id`` and ``created_at`` are never overwritten.
        """
        source = self.to_model(entity)
        for field_name in type(source).model_fields:
            if field_name in {"id", "created_at"} or field_name in exclude:
                continue
            setattr(model, field_name, getattr(source, field_name))
        return model
