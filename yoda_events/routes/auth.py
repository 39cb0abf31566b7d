# yoda_events/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from yoda_events.database import get_db
from yoda_events.models.users import User
from yoda_events.repositories import UserRepository
from yoda_events.schemas.user import RegisterForm, RegistrationResponse, Token, UserLogin, UserResponse
from yoda_events.utils.audit import client_ip, write_log
from yoda_events.utils.hashing import EncoderFactory, get_encoder_factory
from yoda_events.utils.tokenJWT import create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

WELCOME_MESSAGE = "Welcome to the Death Star! Have a magical day!"


# Register a new user; the password is hashed by the User flush hook
@router.post("/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
def register(form: RegisterForm, request: Request, db: Session = Depends(get_db)):
    users = UserRepository(db)

    errors = {}
    if users.username_taken(form.username):
        errors["username"] = ["This username is already taken."]
    if users.email_taken(form.email):
        errors["email"] = ["This email is already registered."]
    if errors:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"username": form.username, "fields": sorted(errors)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=errors)

    user = User(
        username=form.username,
        email=form.email.lower(),
        plain_password=form.plain_password.first,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.username)

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"username": user.username})

    token = create_access_token(data={"sub": user.username})
    return RegistrationResponse(
        access_token=token,
        user=UserResponse.from_user(user),
        message=WELCOME_MESSAGE,
    )


# Authenticate user and issue JWT token
@router.post("/login", response_model=Token)
def login(
    payload: UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    encoder_factory: EncoderFactory = Depends(get_encoder_factory),
):
    user = UserRepository(db).find_one_by_username_or_email(payload.username)

    encoder = encoder_factory.get_encoder(user) if user else None
    if not user or not user.is_active or not encoder.is_password_valid(user.password, payload.password, user.get_salt()):
        write_log(db, user_id=(user.id if user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"username": payload.username})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if encoder.needs_rehash(user.password):
        # Goes through the flush hook like any other password change
        user.plain_password = payload.password
        db.commit()
        logger.info("Rehashed password for user %s", user.username)

    write_log(db, user_id=user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"username": user.username})

    return {"access_token": create_access_token(data={"sub": user.username}), "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return UserResponse.from_user(current_user)
