from typing import List

from pydantic import BaseModel, ConfigDict, model_validator


class PackageDescriptor(BaseModel):
    """One pricing tier. Prices are whole dollars."""

    model_config = ConfigDict(frozen=True)

    slug: str
    name: str
    base_price: int
    display_price: str
    standard_duration_days: int
    rush_duration_days: int
    rush_fee: int
    description: str
    audience: str
    features: List[str]
    cta_label: str
    highlight: bool = False

    @model_validator(mode="after")
    def _check_rush_terms(self) -> "PackageDescriptor":
        if self.rush_duration_days >= self.standard_duration_days:
            raise ValueError("rush delivery must be shorter than the standard timeline")
        if self.rush_fee < 0:
            raise ValueError("rush fee cannot be negative")
        return self

    @property
    def timeline(self) -> str:
        return (
            f"Typical timeline: {self.standard_duration_days} days "
            f"(rush {self.rush_duration_days} days +${self.rush_fee})"
        )
