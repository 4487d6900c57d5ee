"""Session management DTOs"""

from typing import List, Optional

from pydantic import BaseModel

from authcore.app.services.views import SessionView


class RevokeSessionResponse(BaseModel):
    session_id: str
    revoked: bool


class RevokeAllSessionsResponse(BaseModel):
    revoked_count: int
    kept_session_id: Optional[str] = None


class SessionListResponse(BaseModel):
    sessions: List[SessionView]


class CleanupResponse(BaseModel):
    deleted_count: int
