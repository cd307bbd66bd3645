"""FastAPI glue: multipart forms in, downloads and error envelopes out."""

import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData

from sheetport.exceptions import ExcelError
from sheetport.schemas.common import ApiResponse
from sheetport.schemas.transfer import ExportPayload

logger = logging.getLogger(__name__)


async def read_form(request: Request) -> FormData:
    """Parse the multipart body so it can be handed to ``parse_import``."""
    return await request.form()


def download_response(payload: ExportPayload) -> Response:
    """Wrap an exported workbook in an attachment response."""
    return Response(
        content=payload.content,
        media_type=payload.content_type,
        headers=payload.headers,
    )


async def excel_error_handler(request: Request, exc: ExcelError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse.from_error(exc).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ExcelError, excel_error_handler)
