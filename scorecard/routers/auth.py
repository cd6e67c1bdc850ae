"""Routes for admin login and logout."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from scorecard.schemas import LoginRequest
from scorecard.services.auth import admin_password, admin_tokens, require_admin

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, expected: str = Depends(admin_password)) -> JSONResponse:
    """Exchange the admin password for a bearer token."""
    if not body.password:
        return JSONResponse(content={"error": "Password required"}, status_code=400)

    token = admin_tokens.login(body.password, expected)
    if token is None:
        return JSONResponse(content={"error": "Invalid password"}, status_code=401)
    return JSONResponse(content={"token": token})


@router.post("/logout")
async def logout(token: str = Depends(require_admin)) -> JSONResponse:
    admin_tokens.revoke(token)
    return JSONResponse(content={"success": True})
