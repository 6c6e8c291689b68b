from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.schemas import ApiResponse
from app.auth.schemas import AdminLogin, AdminProfile, AdminSummary, LoginResponse
from app.auth.service import AuthService
from app.auth.models import Admin
from app.core.dependencies import get_current_admin_user

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(login_data: AdminLogin, db: Session = Depends(get_db)):
    """Login with username and password and receive a bearer token."""
    auth_service = AuthService(db)
    admin, token = auth_service.login(login_data.username, login_data.password)

    return ApiResponse(
        message="Login successful",
        data=LoginResponse(token=token, admin=AdminSummary.model_validate(admin))
    )


@router.get("/profile", response_model=ApiResponse[AdminProfile])
async def get_profile(current_admin: Admin = Depends(get_current_admin_user)):
    """Get the profile of the authenticated admin."""
    return ApiResponse(data=AdminProfile.model_validate(current_admin))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(current_admin: Admin = Depends(get_current_admin_user)):
    """Acknowledge logout. Tokens are not revoked server-side; clients drop them."""
    return ApiResponse(message="Logout successful")
