"""Service address value type."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Location(BaseModel):
    """Coordinates plus a free-text address. Embedded into appointments."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    @property
    def full_address(self) -> str:
        parts = [self.address]
        parts.extend(p for p in (self.city, self.state, self.zip_code) if p)
        return ", ".join(parts)

    @property
    def short_address(self) -> str:
        if self.city:
            return f"{self.address}, {self.city}"
        return self.address
