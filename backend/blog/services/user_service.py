"""
Blog Backend — User Service
=============================

What:  Registration, login and user lookup.
Who:   Called by the users/sessions routes and by Auth (session lookup).

Validation rules (registration):
    - email present (whitespace-only counts as absent), at most 255 chars
    - email not already taken
    - password present, at most 72 bytes (bcrypt's input limit)

bcrypt is deliberately slow, so hashing and checking run in Starlette's
threadpool instead of blocking the event loop.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from blog.exceptions import DatabaseError, InvalidCredentialsError, ValidationFailedError
from blog.models.user import BCRYPT_MAX_BYTES, User, hash_password
from blog.schemas.user import LoginInput, RegistrationInput

logger = logging.getLogger(__name__)

EMAIL_MAX_LENGTH = 255
EMAIL_TAKEN = "Email has already been taken"


class UserService:
    """Stateless; every method receives the request's AsyncSession."""

    async def find_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        try:
            return await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    def validate_registration(self, email: str, password: str) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        if not email:
            errors.setdefault("email", []).append("Email can't be blank")
        elif len(email) > EMAIL_MAX_LENGTH:
            errors.setdefault("email", []).append(
                f"Email is too long (maximum is {EMAIL_MAX_LENGTH} characters)"
            )
        if not password.strip():
            errors.setdefault("password", []).append("Password can't be blank")
        elif len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            errors.setdefault("password", []).append(
                f"Password is too long (maximum is {BCRYPT_MAX_BYTES} bytes)"
            )
        return errors

    async def register(self, db: AsyncSession, form: RegistrationInput) -> User:
        """
        Creates a user from the registration form.

        Raises:
            ValidationFailedError: blank/oversized fields or a taken email.
                Nothing is written in that case.
            DatabaseError: unexpected failure while inserting
        """
        email = form.email.strip()
        errors = self.validate_registration(email, form.password)
        if "email" not in errors and await self.find_by_email(db, email) is not None:
            errors["email"] = [EMAIL_TAKEN]
        if errors:
            raise ValidationFailedError(errors, context={"email": email})

        user = User(email=email)
        user.password_digest = await run_in_threadpool(hash_password, form.password)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await db.rollback()
            raise ValidationFailedError({"email": [EMAIL_TAKEN]}, context={"email": email})
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create your account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User %s registered", user.id)
        return user

    async def authenticate(self, db: AsyncSession, form: LoginInput) -> User:
        """
        Returns the user matching the login form.

        Raises InvalidCredentialsError for an unknown email and for a wrong
        password alike. There is no lockout: a failed attempt changes nothing.
        """
        user = await self.find_by_email(db, form.email.strip())
        if user is None or not await run_in_threadpool(user.authenticate, form.password):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
