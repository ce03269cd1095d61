"""App user entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.app_users.domain.entities import ActiveSession, AppUser
from src.modules.app_users.infrastructure.models import (
    ActiveSessionModel,
    AppUserModel,
)


class AppUserMapper(BaseMapper[AppUser, AppUserModel]):
    """App user entity-model mapper."""

    def to_domain(self, model: AppUserModel) -> AppUser:
        return AppUser.model_validate(model.model_dump())

    def to_model(self, entity: AppUser) -> AppUserModel:
        return AppUserModel(**entity.model_dump())


class ActiveSessionMapper(BaseMapper[ActiveSession, ActiveSessionModel]):
    def to_domain(self, model: ActiveSessionModel) -> ActiveSession:
        return ActiveSession.model_validate(model.model_dump())

    def to_model(self, entity: ActiveSession) -> ActiveSessionModel:
        return ActiveSessionModel(**entity.model_dump())
