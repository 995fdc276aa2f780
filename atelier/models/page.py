from typing import Literal, Optional

from pydantic import BaseModel

PageName = Literal[
    "home",
    "why-us",
    "projects",
    "brief",
    "pay",
    "thank-you",
    "privacy",
    "tech-terms",
    "not-found",
]


class PageView(BaseModel):
    """The page variant chosen for a route, plus the package it is about."""

    page: PageName
    package_slug: Optional[str] = None
