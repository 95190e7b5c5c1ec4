import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from resume_scanner.db.models.user import User
from resume_scanner.core.security import hash_password, verify_password, create_access_token
from resume_scanner.core.auth_dependency import get_db, get_current_user
from resume_scanner.core.errors import server_error
from resume_scanner.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def issue_token(user: User) -> TokenResponse:
    return TokenResponse(token=create_access_token({"sub": str(user.id)}))


# ✅ REGISTER
@router.post("/register", response_model=TokenResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    try:
        email = payload.email.lower()
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

        user = User(
            name=payload.name,
            email=email,
            password_hash=hash_password(payload.password)
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User registered: user_id={user.id}")
        return issue_token(user)

    except HTTPException:
        raise
    except Exception as e:
        raise server_error(db, "Registration failed", e)


# ✅ LOGIN
@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = db.query(User).filter(User.email == payload.email.lower()).first()

        # Same message for unknown email and wrong password
        if not user or not verify_password(payload.password, user.password_hash):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid Credentials")

        logger.info(f"User logged in: user_id={user.id}")
        return issue_token(user)

    except HTTPException:
        raise
    except Exception as e:
        raise server_error(db, "Login failed", e)


# ✅ CURRENT USER
@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)
