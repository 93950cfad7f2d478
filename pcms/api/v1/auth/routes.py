from fastapi import APIRouter, HTTPException, status

from pcms.api.v1.auth.schemas import TokenResponse
from pcms.core.config import settings
from pcms.core.security import create_dev_token

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/dev-token", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def get_dev_token():
    """Generate a development JWT token for testing purposes"""
    if not settings.ENABLE_DEV_TOKEN:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return TokenResponse(token=create_dev_token())
