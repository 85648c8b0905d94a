from fastapi import HTTPException, Request

from statement_analyzer.manager import StatementWorkspace


def get_workspace(request: Request) -> StatementWorkspace:
    workspace = getattr(request.app.state, "workspace", None)
    if not workspace:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return workspace
