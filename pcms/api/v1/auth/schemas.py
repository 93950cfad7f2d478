from pydantic import BaseModel


class TokenResponse(BaseModel):
    """Bearer token for the development principal"""
    token: str
