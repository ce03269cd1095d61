"""Application domain entities."""

from enum import Enum

from pydantic import Field

from src.core.domain.base_entity import BaseEntity


class MessageTemplate(str, Enum):
    """Tenant-customisable user-facing messages, one per login outcome."""

    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    ACCOUNT_DISABLED = "account_disabled"
    ACCOUNT_EXPIRED = "account_expired"
    VERSION_MISMATCH = "version_mismatch"
    HWID_MISMATCH = "hwid_mismatch"


DEFAULT_MESSAGES: dict[MessageTemplate, str] = {
    MessageTemplate.LOGIN_SUCCESS: "Login successful!",
    MessageTemplate.LOGIN_FAILED: "Invalid credentials!",
    MessageTemplate.ACCOUNT_DISABLED: "Account is disabled!",
    MessageTemplate.ACCOUNT_EXPIRED: "Account has expired!",
    MessageTemplate.VERSION_MISMATCH: (
        "Please update your application to the latest version!"
    ),
    MessageTemplate.HWID_MISMATCH: "Hardware ID mismatch detected!",
}


_REQUIRED_FIELDS = frozenset({"name", "version", "hwid_lock_enabled", "is_active"})


class Application(BaseEntity):
    """A tenant's authentication policy, addressed by its API key."""

    owner_id: str = Field(..., description="所属 owner 账户 ID")
    name: str = Field(..., min_length=1, max_length=100, description="应用名称")
    description: str | None = Field(default=None, description="应用描述")
    api_key: str = Field(..., description="API Key（创建后不可变）")
    version: str = Field(default="1.0.0", description="要求的客户端版本")
    hwid_lock_enabled: bool = Field(default=False, description="是否开启 HWID 绑定")
    is_active: bool = Field(default=True, description="是否启用")

    login_success_message: str | None = Field(default=None)
    login_failed_message: str | None = Field(default=None)
    account_disabled_message: str | None = Field(default=None)
    account_expired_message: str | None = Field(default=None)
    version_mismatch_message: str | None = Field(default=None)
    hwid_mismatch_message: str | None = Field(default=None)

    def message(self, template: MessageTemplate) -> str:
        """Return the configured message, falling back to the default."""
        configured = getattr(self, f"{template.value}_message")
        return configured or DEFAULT_MESSAGES[template]

    def requires_version(self, client_version: str | None) -> bool:
        """True when the caller sent a version that differs from the required one.

        Exact string comparison; no semver ordering.
        """
        return bool(client_version) and client_version != self.version

    def is_owned_by(self, owner_id: str) -> bool:
        return self.owner_id == owner_id

    def apply_changes(self, changes: dict[str, object]) -> None:
        """Apply a partial owner update. The API key is never changed."""
        for field_name, value in changes.items():
            if field_name in {"api_key", "owner_id", "id"}:
                continue
            if value is None and field_name in _REQUIRED_FIELDS:
                continue
            setattr(self, field_name, value)
        self._update_timestamp()
