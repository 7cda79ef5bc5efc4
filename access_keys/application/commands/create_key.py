"""
CreateKeyCommand.

Command to issue a new access key.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class CreateKeyCommand:
    """Command to create a key."""

    duration_days: int
    uses_limit: int
    price: Optional[float] = None
    customer_name: str = ""
    customer_email: str = ""
    notes: str = ""
