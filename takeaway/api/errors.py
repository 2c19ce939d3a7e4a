"""Map ProjectError subclasses onto JSON error responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from takeaway.core.exceptions import ProjectError

logger = logging.getLogger(__name__)


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("API: %s %s failed: %s", request.method, request.url.path, exc.to_log_dict())
    else:
        logger.info("API: %s %s -> %d %s", request.method, request.url.path, exc.http_status, exc.code)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProjectError, project_error_handler)
