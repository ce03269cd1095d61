"""License key entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.licenses.domain.entities import LicenseKey
from src.modules.licenses.infrastructure.models import LicenseKeyModel


class LicenseKeyMapper(BaseMapper[LicenseKey, LicenseKeyModel]):
    """License key entity-model mapper."""

    def to_domain(self, model: LicenseKeyModel) -> LicenseKey:
        return LicenseKey(
            id=model.id,
            application_id=model.application_id,
            license_key=model.license_key,
            max_users=model.max_users,
            current_users=model.current_users,
            validity_days=model.validity_days,
            expires_at=model.expires_at,
            is_active=model.is_active,
            description=model.description,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: LicenseKey) -> LicenseKeyModel:
        return LicenseKeyModel(
            id=entity.id,
            application_id=entity.application_id,
            license_key=entity.license_key,
            max_users=entity.max_users,
            current_users=entity.current_users,
            validity_days=entity.validity_days,
            expires_at=entity.expires_at,
            is_active=entity.is_active,
            description=entity.description,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )
