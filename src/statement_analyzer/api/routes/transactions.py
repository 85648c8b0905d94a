from typing import Annotated

from fastapi import APIRouter, Depends

from statement_analyzer.api.dependencies import get_workspace
from statement_analyzer.api.schemas import (
    PresetRequest,
    QueryRequest,
    QueryResponse,
    SummaryRequest,
)
from statement_analyzer.domain.aggregates import compute_totals
from statement_analyzer.domain.filters import apply_period_preset, has_active_filters, quick_preset
from statement_analyzer.manager import StatementWorkspace
from statement_analyzer.models import FilterState, Summary, Transaction

router = APIRouter()


def _resolve_filters(filters: FilterState | None, workspace: StatementWorkspace) -> FilterState:
    """Overlay the fields a client actually sent onto the collection defaults."""
    defaults = workspace.default_filters()
    if filters is None:
        return defaults
    return defaults.model_copy(update=filters.model_dump(exclude_unset=True))


@router.get("/api/transactions", response_model=list[Transaction])
async def list_transactions(
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> list[Transaction]:
    return workspace.transactions


@router.get("/api/filters/default", response_model=FilterState)
async def get_default_filters(
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> FilterState:
    return workspace.default_filters()


@router.post("/api/filters/preset", response_model=FilterState)
async def apply_preset(
    req: PresetRequest,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> FilterState:
    filters = _resolve_filters(req.filters, workspace)
    if req.account is not None and req.category_mode is not None:
        return quick_preset(
            filters,
            req.preset,
            req.account,
            req.category_mode,
            workspace.transactions,
        )
    return apply_period_preset(filters, req.preset, workspace.transactions)


@router.post("/api/transactions/query", response_model=QueryResponse)
async def query_transactions(
    req: QueryRequest,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> QueryResponse:
    filters = _resolve_filters(req.filters, workspace)
    view = workspace.view(filters, req.sort)
    return QueryResponse(
        transactions=view,
        shown=len(view),
        total=len(workspace.transactions),
        totals=compute_totals(view),
        active_filters=has_active_filters(filters, workspace.transactions),
    )


@router.post("/api/transactions/summary", response_model=Summary)
async def summarize_transactions(
    req: SummaryRequest,
    workspace: Annotated[StatementWorkspace, Depends(get_workspace)],
) -> Summary:
    return workspace.summary(_resolve_filters(req.filters, workspace))
