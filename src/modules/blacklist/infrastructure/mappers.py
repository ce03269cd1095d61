"""Blacklist entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType
from src.modules.blacklist.infrastructure.models import BlacklistEntryModel


class BlacklistEntryMapper(BaseMapper[BlacklistEntry, BlacklistEntryModel]):
    """Blacklist entry entity-model mapper."""

    def to_domain(self, model: BlacklistEntryModel) -> BlacklistEntry:
        return BlacklistEntry(
            id=model.id,
            application_id=model.application_id,
            created_by=model.created_by,
            type=BlacklistType(model.type),
            value=model.value,
            reason=model.reason,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: BlacklistEntry) -> BlacklistEntryModel:
        return BlacklistEntryModel(
            id=entity.id,
            application_id=entity.application_id,
            created_by=entity.created_by,
            type=entity.type.value,
            value=entity.value,
            reason=entity.reason,
            is_active=entity.is_active,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )
