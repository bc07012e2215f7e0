from pydantic import AliasChoices, BaseModel, EmailStr, Field


class RegisterIn(BaseModel):
    name: str = Field(..., description="Display name", min_length=1, max_length=100)
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    password: str = Field(..., description="The password of the user", min_length=6)


class StoreRegistrationIn(RegisterIn):
    token: str = Field(
        ..., description="Client-generated link token", min_length=16, max_length=128
    )


class VerifyEmailIn(BaseModel):
    email: EmailStr
    code: str = Field(
        ...,
        min_length=1,
        max_length=16,
        validation_alias=AliasChoices("code", "verificationCode"),
    )


class EmailIn(BaseModel):
    email: EmailStr


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ResetPasswordIn(BaseModel):
    email: EmailStr
    token: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., description="The new password", min_length=6)
