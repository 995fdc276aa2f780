"""Field-level validation for the contact and brief forms.

Each validator returns a mapping of field name to message; an empty mapping
means the form may be sent.
"""

import re
from typing import Dict

from atelier.models.forms import BriefSubmission, ContactSubmission

REQUIRED = "Required"
INVALID_EMAIL = "Enter a valid email"
MISSING_ASSETS = "Provide a note or upload at least one asset file"

_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value or ""))


def _require(errors: Dict[str, str], **fields: str) -> None:
    for name, value in fields.items():
        if not value:
            errors[name] = REQUIRED


def validate_contact(contact: ContactSubmission) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _require(errors, first=contact.first, last=contact.last)
    if not is_valid_email(contact.email):
        errors["email"] = INVALID_EMAIL
    _require(errors, project=contact.project, budget=contact.budget)
    return errors


def validate_brief(brief: BriefSubmission) -> Dict[str, str]:
    """Check the brief's required fields, email shape and asset information."""
    errors: Dict[str, str] = {}
    _require(errors, company=brief.company, contact_name=brief.contact_name)
    if not is_valid_email(brief.email):
        errors["email"] = INVALID_EMAIL
    _require(errors, phone=brief.phone, pages=brief.pages, goal=brief.goal)
    if not brief.assets_note and not brief.files:
        errors["assets_note"] = MISSING_ASSETS
    return errors
