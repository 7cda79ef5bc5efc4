"""
UpdateSettingsCommand.

Command to change store settings. Requires the current admin password.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class UpdateSettingsCommand:
    """Command to update store settings."""

    admin_password: str
    redirect_url: Optional[str] = None
    auto_expire: Optional[bool] = None
    enable_logging: Optional[bool] = None
    new_admin_password: Optional[str] = None
