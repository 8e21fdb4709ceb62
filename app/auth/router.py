from datetime import datetime, timezone
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from slugify import slugify
import structlog

from ..db import get_db
from ..models.models import User, Role
from ..schemas.auth import LoginRequest, TokenResponse, MeResponse, UserCreate, UserResponse
from .security import (
    get_password_hash,
    verify_password,
    create_access_token,
    get_current_user,
    require_roles,
)


router = APIRouter(prefix="/auth", tags=["auth"])
log = structlog.get_logger(__name__)


def compute_username(first_name: str, last_name: str, suffix: Optional[int] = None) -> str:
    last = slugify(last_name, lowercase=True, separator="", regex_pattern=r"[^A-Za-z0-9]")
    first_initial = slugify(first_name[:1], lowercase=True, separator="", regex_pattern=r"[^A-Za-z0-9]")
    base = f"{last}{first_initial}"
    return f"{base}{suffix}" if suffix else base


def find_available_username(db: Session, model, first_name: str, last_name: str) -> str:
    """First free ``lastnameF``, ``lastnameF1``, ... for ``model.username``."""
    candidate = compute_username(first_name, last_name)
    i = 0
    while True:
        name = f"{candidate}{i}" if i > 0 else candidate
        if not db.query(model).filter(model.username == name).first():
            return name
        i += 1


def get_or_create_roles(db: Session, names: List[str]) -> List[Role]:
    roles = []
    for name in names:
        role = db.query(Role).filter(Role.name == name).first()
        if not role:
            role = Role(name=name)
            db.add(role)
            db.flush()
        roles.append(role)
    return roles


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_active=user.is_active,
        roles=user.role_names,
    )


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter((User.username == req.identifier) | (User.email == req.identifier)).first()
    if not user or not user.is_active or not verify_password(req.password, user.password_hash):
        log.info("login_failed", identifier=req.identifier)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    access = create_access_token(str(user.id), roles=user.role_names)
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return TokenResponse(access_token=access)


@router.get("/me", response_model=MeResponse)
def me(user: User = Depends(get_current_user)):
    return MeResponse(
        id=str(user.id),
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        roles=user.role_names,
    )


@router.get("/users", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db), _=Depends(require_roles("admin"))):
    return [_user_response(u) for u in db.query(User).order_by(User.created_at.desc()).all()]


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db), _=Depends(require_roles("admin"))):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="Email already registered")
    username = payload.username or find_available_username(db, User, payload.first_name, payload.last_name)
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=409, detail="Username already taken")
    user = User(
        username=username,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    user.roles = get_or_create_roles(db, payload.roles)
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("user_created", user_id=str(user.id), roles=user.role_names)
    return _user_response(user)
