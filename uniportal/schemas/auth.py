from pydantic import BaseModel
from typing import List, Optional


# -------------------------------------------------------------------
# LOGIN REQUEST (JSON clients; the login page posts a form)
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    username: str          # username or email
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    redirect_to: str


# -------------------------------------------------------------------
# SESSION PAYLOAD exposed to views / downstream clients
# -------------------------------------------------------------------
class SessionPayload(BaseModel):
    id: str
    role: str
    status: Optional[str] = None
    readOnly: bool
    allowedModules: Optional[List[str]] = None
