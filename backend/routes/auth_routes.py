import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.dependencies import get_current_user_id
from backend.auth.passwords import get_password_hash, verify_password
from backend.core.errors import integrity_error_to_http
from backend.core.responses import DataResponse, MessageDataResponse
from backend.database import get_db
from backend.models.user import User

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'


def _require_text(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f'Please provide {field_name}')
    return value


class RegisterRequest(BaseModel):
    name: str = Field(max_length=100)
    email: str = Field(max_length=255)
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_text(value, 'name').strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = _require_text(value, 'email').strip()
        if '@' not in normalized:
            raise ValueError('Please provide a valid email')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _require_text(value, 'password')


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _require_text(value, 'email and password').strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _require_text(value, 'email and password')


class UserPublic(BaseModel):
    user_id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class AuthPayload(BaseModel):
    token: str
    user: UserPublic


def build_auth_payload(user: User) -> AuthPayload:
    return AuthPayload(
        token=jwt_handler.create_access_token(user.user_id),
        user=UserPublic.model_validate(user),
    )


@router.post(
    '/register',
    response_model=MessageDataResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user = User(
        name=data.name,
        email=data.email,
        password_hash=get_password_hash(data.password),
    )

    try:
        db.add(user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise integrity_error_to_http(exc, conflict_detail='User already exists with this email') from exc

    db.refresh(user)
    logger.info('Registered user %s', user.user_id)

    return MessageDataResponse[AuthPayload](
        message='User registered successfully',
        data=build_auth_payload(user),
    )


@router.post('/login', response_model=MessageDataResponse[AuthPayload])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()

    if not verify_password(data.password, user.password_hash if user else None):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )

    return MessageDataResponse[AuthPayload](
        message='Login successful',
        data=build_auth_payload(user),
    )


@router.get('/me', response_model=DataResponse[UserPublic])
def me(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.user_id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='User not found',
        )
    return DataResponse[UserPublic](data=UserPublic.model_validate(user))
