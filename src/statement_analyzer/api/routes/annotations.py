from typing import Annotated

from fastapi import APIRouter, Depends

from statement_analyzer.api.dependencies import get_workspace
from statement_analyzer.api.schemas import AnnotationUpdate
from statement_analyzer.manager import StatementWorkspace
from statement_analyzer.models import TransactionAnnotation

router = APIRouter()


@router.get("/api/annotations/{key:path}", response_model=TransactionAnnotation | None)
async def get_annotation(
    key: str,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> TransactionAnnotation | None:
    return workspace.annotations.get(key)


@router.patch("/api/annotations/{key:path}", response_model=TransactionAnnotation)
async def update_annotation(
    key: str,
    update: AnnotationUpdate,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> TransactionAnnotation:
    return workspace.annotate(key, update.model_dump(exclude_none=True))
