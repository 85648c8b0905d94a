from typing import Annotated

from fastapi import APIRouter, Depends

from statement_analyzer.api.dependencies import get_workspace
from statement_analyzer.api.schemas import EssentialsResponse, EssentialUpdate
from statement_analyzer.manager import StatementWorkspace

router = APIRouter()


def _essentials_payload(workspace: StatementWorkspace) -> EssentialsResponse:
    return EssentialsResponse(
        builtin=sorted(workspace.essentials.base),
        custom=sorted(workspace.essentials.custom()),
    )


@router.get("/api/essentials", response_model=EssentialsResponse)
async def list_essentials(
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> EssentialsResponse:
    return _essentials_payload(workspace)


@router.put("/api/essentials/{category}", response_model=EssentialsResponse)
async def mark_essential(
    category: str,
    update: EssentialUpdate,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> EssentialsResponse:
    workspace.essentials.mark(category, update.essential)
    return _essentials_payload(workspace)
