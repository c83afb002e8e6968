"""
B.I Booster Backend — Admin Console Routes
============================================

What:  The two admin handlers: payment verification and template delivery.
Who:   The admin console, authenticated by the X-Admin-Key header.

The verification handler keeps its own response contract, which the admin
console already parses:
    success → the action's payload ({success, message} or {orders: [...]})
    unknown or missing action → 400 {"error": "Invalid action"}
    malformed body or ids     → 400 {"error": "Invalid <field>: ..."}
    other failure             → 400/404/500 {"error": "<message>"}
"""

import logging
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.database import get_db_session
from bibooster.dependencies import require_admin
from bibooster.exceptions import (
    BoosterError,
    InvalidActionError,
    NotFoundError,
    ValidationError,
)
from bibooster.schemas.admin import (
    AdminActionRequest,
    TemplateDeliveryResponse,
)
from bibooster.schemas.common import ActionErrorResponse, ErrorResponse
from bibooster.services.admin_service import admin_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "/verify",
    response_model=None,
    responses={
        200: {"description": "{success, message} for verify_payment, {orders: [...]} for the list actions"},
        400: {"description": "Invalid action or missing ids", "model": ActionErrorResponse},
        500: {"description": "Backend failure", "model": ActionErrorResponse},
    },
    summary="Admin verification handler (action-dispatched)",
)
async def admin_verify(
    payload: Any = Body(
        default=None,
        description='{"action": "...", "userId": "<uuid>", "orderId": "<uuid>"}',
    ),
    db: AsyncSession = Depends(get_db_session),
):
    # Malformed bodies answer {"error": ...} like every other failure here
    try:
        body = AdminActionRequest.model_validate(payload if payload is not None else {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "body"
        logger.warning("Admin verify: malformed request (%s)", field)
        return JSONResponse(status_code=400, content={"error": f"Invalid {field}: {first['msg']}"})

    try:
        return await admin_service.handle_action(db, body)
    except InvalidActionError:
        logger.warning("Admin verify: invalid action %r", body.action)
        return JSONResponse(status_code=400, content={"error": "Invalid action"})
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    except NotFoundError as e:
        return JSONResponse(status_code=404, content={"error": e.message})
    except BoosterError as e:
        logger.error("Admin verify failed (%s): %s", body.action, e.message)
        return JSONResponse(status_code=500, content={"error": e.message})


@router.post(
    "/orders/{order_id}/template",
    response_model=TemplateDeliveryResponse,
    responses={
        400: {"description": "No file/URL or file rejected", "model": ErrorResponse},
        404: {"description": "Order not found", "model": ErrorResponse},
    },
    summary="Deliver the finished template for an order",
    description=(
        "Send either a file (.zip, .rar, .pdf, .doc, .docx) or a URL. "
        "The order moves to status 'completed' with template_path set."
    ),
)
async def deliver_template(
    order_id: uuid.UUID,
    file: Optional[UploadFile] = File(default=None),
    url: Optional[str] = Form(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> TemplateDeliveryResponse:
    filename = None
    content = None
    file_size = None
    if file is not None and file.filename:
        filename = file.filename
        content = await file.read()
        # Size of this part alone; the request's Content-Length also counts
        # the multipart boundaries and the url field.
        file_size = file.size

    return await admin_service.deliver_template(
        db,
        order_id,
        filename=filename,
        content=content,
        content_length=file_size,
        url=url,
    )
