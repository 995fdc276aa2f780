"""Client for the third-party form-ingestion endpoint."""

import logging
from typing import List, Optional, Sequence, Tuple

import httpx

from atelier.config import SiteConfig, get_config
from atelier.models.forms import AssetFile, BriefSubmission, ContactSubmission
from atelier.models.package import PackageDescriptor
from atelier.services.catalog import compute_total

logger = logging.getLogger(__name__)

ASSET_FIELD_NAME = "assetsFiles"


class SubmissionError(RuntimeError):
    """The form backend could not be reached or rejected the submission."""


async def submit_form(
    fields: Sequence[Tuple[str, str]],
    files: Optional[List[AssetFile]] = None,
    *,
    config: Optional[SiteConfig] = None,
) -> None:
    """POST *fields* (and any *files*) to the form-ingestion endpoint.

    Without files the body is URL-encoded; with files it is multipart and
    every file is sent under :data:`ASSET_FIELD_NAME`.  The response body is
    never read.

    Raises:
        SubmissionError: on network errors or a non-success status.
    """
    config = config or get_config()
    multipart = [
        (ASSET_FIELD_NAME, (asset.filename, asset.content, asset.content_type))
        for asset in files or []
    ]
    try:
        async with httpx.AsyncClient(timeout=config.request_timeout) as client:
            # httpx builds a multipart body only when at least one file part is
            # present; the form backend accepts a URL-encoded brief as well.
            response = await client.post(
                config.form_url,
                data=dict(fields),
                files=multipart or None,
            )
            response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Form submission failed: %s", exc)
        raise SubmissionError(str(exc)) from exc


async def submit_contact(contact: ContactSubmission, *, config: Optional[SiteConfig] = None) -> None:
    fields = [("form-name", "contact"), *contact.form_fields().items()]
    await submit_form(fields, config=config)


async def submit_brief(
    brief: BriefSubmission,
    package: PackageDescriptor,
    *,
    config: Optional[SiteConfig] = None,
) -> None:
    """Send *brief* with the package name, rush choice and computed total."""
    total = compute_total(package, brief.rush_requested)
    fields = [
        ("form-name", f"brief-{package.slug}"),
        ("package", package.name),
        ("rush", "Yes" if brief.rush_requested else "No"),
        ("total", f"${total}"),
        *brief.form_fields(),
    ]
    logger.info(
        "Submitting brief",
        extra={"package": package.slug, "rush": brief.rush_requested, "files": len(brief.files)},
    )
    await submit_form(fields, brief.files, config=config)
