"""
Blog Backend — User Input and View Schemas
============================================

Registration and login forms, and the user shapes rendered back to views.
Passwords only ever appear in the input models; no view model has a
password field, so a re-rendered form can't echo one back.
"""

from fastapi import Form
from pydantic import BaseModel, Field


class RegistrationInput(BaseModel):
    """POST /users form."""
    email: str = Field(default="", description="Login email, must be unique")
    password: str = Field(default="", description="Plaintext password, hashed before storage")

    @classmethod
    def as_form(
        cls,
        email: str = Form(default=""),
        password: str = Form(default=""),
    ) -> "RegistrationInput":
        return cls(email=email, password=password)


class LoginInput(BaseModel):
    """POST /login form."""
    email: str = ""
    password: str = ""

    @classmethod
    def as_form(
        cls,
        email: str = Form(default=""),
        password: str = Form(default=""),
    ) -> "LoginInput":
        return cls(email=email, password=password)


class UserForm(BaseModel):
    """Registration form values shown back after a failed submit."""
    email: str = ""


class UserView(BaseModel):
    """The logged-in user as every rendered page sees it."""
    id: int
    email: str

    model_config = {"from_attributes": True}
