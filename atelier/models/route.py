from typing import Dict, List

from pydantic import BaseModel, Field


class Route(BaseModel):
    """Structured view of a location fragment such as ``#/pay/growth?rush=1``."""

    page: str = ""
    params: List[str] = Field(default_factory=list)
    query: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_home(self) -> bool:
        return self.page == ""
