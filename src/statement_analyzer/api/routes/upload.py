from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from statement_analyzer.api.dependencies import get_workspace
from statement_analyzer.api.schemas import IngestRequest
from statement_analyzer.core import settings
from statement_analyzer.domain.ingestion import CsvFormatError, IngestionError
from statement_analyzer.logger import get_logger
from statement_analyzer.manager import StatementWorkspace
from statement_analyzer.models import IngestionResult

logger = get_logger(__name__)

router = APIRouter()


def _error(status_code: int, error: str, details: object | None = None) -> JSONResponse:
    content: dict[str, object] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@router.post("/api/upload-csv", response_model=IngestionResult)
async def upload_csv(
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
    file: Annotated[UploadFile | None, File()] = None,
) -> IngestionResult | JSONResponse:
    if file is None:
        return _error(400, "No file provided")

    data = await file.read()
    if len(data) > settings.MAX_UPLOAD_BYTES:
        logger.warning(
            "[UPLOAD] %s rejected: %d bytes exceeds limit of %d.",
            file.filename,
            len(data),
            settings.MAX_UPLOAD_BYTES,
        )
        return _error(413, "File too large", f"Limit is {settings.MAX_UPLOAD_BYTES} bytes")

    logger.info("[UPLOAD] Received %s (%d bytes).", file.filename, len(data))
    try:
        return workspace.load_csv(data)
    except CsvFormatError as exc:
        logger.warning("[UPLOAD] CSV parsing failed for %s: %s", file.filename, exc.details)
        return _error(400, "CSV parsing error", exc.details)
    except IngestionError as exc:
        logger.warning("[UPLOAD] Rejected %s: %s", file.filename, exc)
        return _error(400, "Failed to process file", str(exc))
    except Exception as exc:
        logger.exception("[UPLOAD] Upload error for %s", file.filename)
        return _error(500, "Failed to process file", str(exc) or "Unknown error")


@router.post("/api/ingest", response_model=IngestionResult)
async def ingest_rows(
    req: IngestRequest,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> IngestionResult | JSONResponse:
    try:
        return workspace.load_rows(req.rows)
    except IngestionError as exc:
        return _error(400, "Failed to process rows", str(exc))
