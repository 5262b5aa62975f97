# barbershop/routers/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import Token
from barbershop.auth import verify_password, create_access_token

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # OAuth2 calls it "username"; we log in by phone number.
    phone = form_data.username
    password = form_data.password

    user = session.exec(
        select(User).where(User.phone == phone)
    ).first()

    if user is None or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.phone})
    return {"access_token": token, "token_type": "bearer"}
