from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class PendingOut(BaseModel):
    status: Literal["pending"] = "pending"
    email: str = Field(..., description="The normalized email awaiting confirmation")
    expires_at: datetime


class MessageOut(BaseModel):
    message: str


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None


class VerifiedOut(BaseModel):
    message: str = "Email verified successfully"
    token: str
    user: UserOut


class LoginOut(BaseModel):
    id: str
    name: str
    email: str
    token: str
    verified: Literal[True] = True


class LogoutOut(BaseModel):
    success: bool = True


class PendingItemOut(BaseModel):
    store: str
    email: str
    expires_at: datetime


class PasswordResetOut(BaseModel):
    message: str = "Password reset successfully. Please login with your new password."
    id: str
    email: str
