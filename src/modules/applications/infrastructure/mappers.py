"""Application entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.applications.domain.entities import Application
from src.modules.applications.infrastructure.models import ApplicationModel


class ApplicationMapper(BaseMapper[Application, ApplicationModel]):
    """Application entity-model mapper."""

    def to_domain(self, model: ApplicationModel) -> Application:
        return Application.model_validate(model.model_dump())

    def to_model(self, entity: Application) -> ApplicationModel:
        return ApplicationModel(**entity.model_dump())
