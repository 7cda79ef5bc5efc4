"""
Store settings domain entity.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict

DEFAULT_REDIRECT_URL = "https://your-site.com/purchase"
DEFAULT_ADMIN_PASSWORD = "admin123"


@dataclass(frozen=True)
class StoreSettings:
    """
    Process-wide settings, one instance per store.

    Mutated only through the authenticated settings update.
    """

    redirect_url: str = DEFAULT_REDIRECT_URL
    auto_expire: bool = True
    enable_logging: bool = True
    admin_password: str = DEFAULT_ADMIN_PASSWORD

    def __post_init__(self):
        """Validate settings."""
        if not self.admin_password:
            raise ValueError("Admin password cannot be empty")

    def update(self, **changes: Any) -> "StoreSettings":
        """
        Create new settings with the given fields changed.

        Fields passed as None are left untouched.
        """
        unknown = set(changes) - set(self.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def public_view(self) -> Dict[str, Any]:
        """Settings exposed to clients (no credential)."""
        return {
            "redirect_url": self.redirect_url,
            "auto_expire": self.auto_expire,
            "enable_logging": self.enable_logging,
        }
