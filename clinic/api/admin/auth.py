from fastapi import APIRouter, Depends

from clinic.core.config import Settings
from clinic.core.deps import get_settings
from clinic.schemas.admin import AdminLogin
from clinic.services.accounts import authenticate_admin, issue_admin_token

router = APIRouter()


@router.post("/login")
def login(payload: AdminLogin, settings: Settings = Depends(get_settings)):
    email = authenticate_admin(settings, payload.email, payload.password)
    return {"success": True, "message": "Login successful", "token": issue_admin_token(settings, email)}
