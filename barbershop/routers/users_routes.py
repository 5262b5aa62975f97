# barbershop/routers/users_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User
from barbershop.sanitize import sanitize_name, sanitize_phone
from barbershop.schemas import UserCreate, UserPublic
from barbershop.auth import get_current_user, hash_password, identity

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    phone = sanitize_phone(user.phone)

    # 1) Check if phone already exists
    existing = session.exec(
        select(User).where(User.phone == phone)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Phone already registered")

    # 2) Create user in DB; self-registration is always a client
    db_user = User(
        phone=phone,
        name=sanitize_name(user.name),
        password_hash=hash_password(user.password),
        role="client",
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id

    # 3) Return public user
    return identity(db_user)
