"""Models for auth-related requests and responses."""

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    """Credentials posted to the login route.

    :param email: Email the account was registered with
    :param password: Plaintext password
    """

    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Response model for login requests.

    :param response: The JWT access token
    """

    response: str
