"""Contact-form and brief submission endpoints."""

import logging
from functools import partial
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from atelier.config import get_config
from atelier.models.api import BriefAccepted, SubmissionAccepted, ValidationFailed
from atelier.models.forms import AssetFile, ContactSubmission, brief_wire_errors
from atelier.routers.limits import limiter
from atelier.services.catalog import CATALOG
from atelier.services.forms import SubmissionError, submit_brief, submit_contact
from atelier.services.funnel import BriefFlow
from atelier.services.routing import to_fragment
from atelier.services.validation import validate_contact

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Forms"])


@router.post(
    "/contact",
    response_model=SubmissionAccepted,
    responses={422: {"model": ValidationFailed}},
    summary="Send the home-page contact form",
)
@limiter.limit("5/minute")
async def contact(request: Request, body: ContactSubmission) -> SubmissionAccepted | JSONResponse:
    errors = validate_contact(body)
    if errors:
        logger.info("Contact form rejected by validation", extra={"fields": sorted(errors)})
        return JSONResponse(status_code=422, content={"errors": errors})

    config = get_config()
    try:
        await submit_contact(body, config=config)
    except SubmissionError:
        raise HTTPException(
            status_code=502, detail=f"Submission failed. Please email {config.support_email}"
        )
    return SubmissionAccepted(message="Thanks! Your message is in.")


@router.post(
    "/brief/{slug}",
    response_model=BriefAccepted,
    responses={422: {"model": ValidationFailed}},
    summary="Send a project brief and continue to payment",
    description=(
        "Accepts the brief as multipart form data, validates it, forwards it "
        "(with any asset files) to the form backend and returns the payment "
        "page fragment to navigate to."
    ),
)
@limiter.limit("5/minute")
async def brief(
    request: Request,
    slug: str,
    company: str = Form(""),
    contact_name: str = Form("", alias="contact"),
    email: str = Form(""),
    phone: str = Form(""),
    pages: str = Form(""),
    goal: str = Form(""),
    assets_note: str = Form("", alias="assetsNote"),
    seo: str = Form(""),
    integrations: str = Form(""),
    ecommerce: bool = Form(False),
    crm: bool = Form(False),
    references: str = Form(""),
    competitors: str = Form(""),
    notes: str = Form(""),
    rush: bool = Form(False),
    assets_files: Optional[List[UploadFile]] = File(None, alias="assetsFiles"),
) -> BriefAccepted | JSONResponse:
    package = CATALOG.lookup(slug)
    if package is None:
        raise HTTPException(status_code=404, detail="Page not found")

    config = get_config()
    flow = BriefFlow(package, config=config, submit=partial(submit_brief, config=config))
    flow.update(
        company=company,
        contact_name=contact_name,
        email=email,
        phone=phone,
        pages=pages,
        goal=goal,
        assets_note=assets_note,
        files=await _read_assets(assets_files or []),
        seo=seo,
        integrations=integrations,
        ecommerce=ecommerce,
        crm=crm,
        references=references,
        competitors=competitors,
        notes=notes,
    )
    flow.set_rush(rush)

    if not await flow.submit():
        if flow.errors:
            return JSONResponse(status_code=422, content={"errors": brief_wire_errors(flow.errors)})
        raise HTTPException(status_code=502, detail=flow.message)

    return BriefAccepted(redirect=to_fragment(flow.next_fragment), total=flow.total)


async def _read_assets(uploads: List[UploadFile]) -> List[AssetFile]:
    """Read every uploaded file once; empty file inputs are skipped."""
    assets: List[AssetFile] = []
    for upload in uploads:
        content = await upload.read()
        if not upload.filename and not content:
            continue
        assets.append(
            AssetFile(
                filename=upload.filename or "upload",
                content=content,
                content_type=upload.content_type or "application/octet-stream",
            )
        )
    return assets
