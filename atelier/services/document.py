"""Rendered page markup and element lookup."""

from bs4 import BeautifulSoup

HOME_SECTIONS = ("hero", "showcase", "packages", "process", "contact")


def render_home_markup() -> str:
    """Skeleton of the home page: one anchored section per block."""
    sections = "".join(f'<section id="{section}"></section>' for section in HOME_SECTIONS)
    return f"<main>{sections}</main>"


class HtmlDocument:
    """A parsed page that can answer whether an element id is present."""

    def __init__(self, markup: str) -> None:
        self._soup = BeautifulSoup(markup, "lxml")

    def has_element(self, element_id: str) -> bool:
        return self._soup.find(id=element_id) is not None


def home_document() -> HtmlDocument:
    return HtmlDocument(render_home_markup())
