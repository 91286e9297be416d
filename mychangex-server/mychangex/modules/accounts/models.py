"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(slots=True)
class Account:
    id: str
    phone: str
    full_name: str
    balance: Decimal
    pin_hash: str = field(default="", repr=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.full_name or "User"


@dataclass(slots=True)
class AccountCreateInput:
    phone: str
    full_name: str
    pin: str = field(repr=False)
