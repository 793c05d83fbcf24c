from typing import Optional
import uuid
from datetime import datetime, timedelta

import jwt
from loguru import logger
from sqlmodel import Session, select
from fastapi import HTTPException, status

from app.core.config import settings
from app.db.schema import User, Company, AccountType
from app.models.auth import Token, TokenData
from app.models.company import CompanyRead
from app.models.user import UserCreate, UserRead
from .password import get_password_hash, verify_password


class UserService:
    ALGORITHM = "HS256"

    def __init__(self, session: Session):
        self.session = session

    def _create_jwt(self, subject: str, expires_delta: timedelta, type: str) -> str:
        """Helper to sign JWTs with specific types."""
        to_encode = {
            "sub": str(subject),
            "exp": datetime.utcnow() + expires_delta,
            "type": type
        }
        return jwt.encode(to_encode, settings.secret_key, algorithm=self.ALGORITHM)

    def _decode_jwt(self, token: str, expected_type: str) -> Optional[TokenData]:
        try:
            payload = jwt.decode(token, settings.secret_key,
                                 algorithms=[self.ALGORITHM])
            user_id = payload.get("sub")
            token_type = payload.get("type")

            if not user_id or token_type != expected_type:
                return None

            return TokenData(user_id=uuid.UUID(user_id))
        except (jwt.PyJWTError, ValueError):
            return None

    def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def get_company_for_account(self, user: User) -> Optional[Company]:
        statement = select(Company).where(Company.account_id == user.id)
        return self.session.exec(statement).first()

    def create_user(self, user_in: UserCreate) -> User:
        """
        Registers an account. Company accounts get their Company row in the
        same transaction.
        """
        if self.get_user_by_email(user_in.email):
            raise ValueError("A user with this email already exists.")

        if user_in.account_type == AccountType.COMPANY:
            existing_company = self.session.exec(
                select(Company).where(Company.company_name == user_in.company_name)
            ).first()
            if existing_company:
                raise ValueError("A company with this name already exists.")

        try:
            new_user = User(
                email=user_in.email,
                hashed_password=get_password_hash(user_in.password),
                username=user_in.username,
                mobile=user_in.mobile,
                account_type=user_in.account_type,
                is_active=True
            )
            self.session.add(new_user)
            self.session.flush()

            if user_in.account_type == AccountType.COMPANY:
                self.session.add(Company(
                    account_id=new_user.id,
                    company_name=user_in.company_name
                ))

            self.session.commit()
            self.session.refresh(new_user)

            logger.info(
                f"Registration successful for {new_user.email} ({new_user.account_type.value})")
            return new_user

        except Exception as e:
            self.session.rollback()
            logger.error(f"Registration failed: {str(e)}")
            raise e

    def to_read(self, user: User) -> UserRead:
        company = self.get_company_for_account(user)
        return UserRead(
            id=user.id,
            email=user.email,
            username=user.username,
            mobile=user.mobile,
            eco_points=user.eco_points,
            account_type=user.account_type,
            is_active=user.is_active,
            company=CompanyRead(id=company.id, company_name=company.company_name)
            if company else None
        )

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Verify email and password hash."""
        user = self.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def generate_access_token(self, user: User) -> str:
        return self._create_jwt(
            subject=user.id,
            expires_delta=timedelta(
                minutes=settings.access_token_expire_minutes),
            type="access"
        )

    def generate_tokens(self, user: User) -> Token:
        refresh_token = self._create_jwt(
            subject=user.id,
            expires_delta=timedelta(
                minutes=settings.refresh_token_expire_minutes),
            type="refresh"
        )
        return Token(
            access_token=self.generate_access_token(user),
            refresh_token=refresh_token,
            token_type="bearer",
            account_type=user.account_type
        )

    def verify_access_token(self, token: str) -> Optional[TokenData]:
        return self._decode_jwt(token, "access")

    def verify_refresh_token(self, token: str) -> Optional[TokenData]:
        return self._decode_jwt(token, "refresh")

    def validate_user(self, user_id: uuid.UUID) -> Optional[User]:
        """Retrieves user and checks is_active flag."""
        user = self.get_user_by_id(user_id)
        if not user or not user.is_active:
            return None
        return user

    def refresh_session(self, refresh_token: str) -> str:
        """
        Exchange a valid refresh token for a new access token.
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        token_data = self.verify_refresh_token(refresh_token)
        if not token_data:
            raise credentials_exception

        user = self.validate_user(token_data.user_id)
        if not user:
            raise credentials_exception

        return self.generate_access_token(user)
