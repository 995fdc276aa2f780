from typing import Dict, List, Literal, Tuple

from pydantic import BaseModel, Field

ContactTitle = Literal["Mr", "Ms", "Mx", "Dr", "Prof", "Other"]

# brief fields whose form name differs from the attribute name
BRIEF_WIRE_NAMES = {"contact_name": "contact", "assets_note": "assetsNote"}


class AssetFile(BaseModel):
    """A file attached to a brief. Read once at submission time."""

    filename: str
    content: bytes = b""
    content_type: str = "application/octet-stream"


class BriefSubmission(BaseModel):
    """Structured project brief collected before payment."""

    package_slug: str
    company: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    pages: str = ""
    goal: str = ""
    assets_note: str = ""
    files: List[AssetFile] = Field(default_factory=list)
    seo: str = ""
    integrations: str = ""
    ecommerce: bool = False
    crm: bool = False
    references: str = ""
    competitors: str = ""
    notes: str = ""
    rush_requested: bool = False

    def form_fields(self) -> List[Tuple[str, str]]:
        """Text fields in the order and under the names the form backend expects."""
        return [
            ("company", self.company),
            ("contact", self.contact_name),
            ("email", self.email),
            ("phone", self.phone),
            ("pages", self.pages),
            ("goal", self.goal),
            ("assetsNote", self.assets_note),
            ("seo", self.seo),
            ("integrations", self.integrations),
            ("ecommerce", "Yes" if self.ecommerce else "No"),
            ("crm", "Yes" if self.crm else "No"),
            ("references", self.references),
            ("competitors", self.competitors),
            ("notes", self.notes),
        ]


class ContactSubmission(BaseModel):
    """Home-page contact form."""

    title: ContactTitle = "Mr"
    first: str = ""
    last: str = ""
    email: str = ""
    project: str = ""
    budget: str = ""
    message: str = ""

    def form_fields(self) -> Dict[str, str]:
        return self.model_dump()


def brief_wire_errors(errors: Dict[str, str]) -> Dict[str, str]:
    """Re-key brief validation errors by the form field names a client posts."""
    return {BRIEF_WIRE_NAMES.get(name, name): message for name, message in errors.items()}
