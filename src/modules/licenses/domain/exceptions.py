"""License domain exceptions."""

from src.core.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)


class LicenseKeyNotFoundError(EntityNotFoundError):
    def __init__(self, license_key_id: str | None = None) -> None:
        super().__init__("LicenseKey", license_key_id)


class DuplicateLicenseKeyError(DuplicateEntityError):
    error_code = "DUPLICATE_LICENSE_KEY"

    def __init__(self, license_key: str) -> None:
        super().__init__("LicenseKey", "key", license_key)


class LicenseExpiryRequiredError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Either validity_days or expires_at is required")
