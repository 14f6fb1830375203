import logging
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.security import OAuth2PasswordRequestForm
from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from jobhunt.core.auth_dependency import get_current_user_obj
from jobhunt.core.errors import ConflictError, ValidationError
from jobhunt.core.logging_config import sanitize_log_data
from jobhunt.core.security import create_access_token, hash_password, verify_password
from jobhunt.core.validators import parse_requirements
from jobhunt.db.models.user import User
from jobhunt.db.session import get_db
from jobhunt.schemas.user import RegisterRequest, TokenResponse, UserResponse
from jobhunt.services.storage_service import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/user", tags=["User"])

RESUME_EXTENSIONS = (".pdf", ".doc", ".docx")
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")


# ✅ REGISTER
@router.post("/register", status_code=201, response_model=UserResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    logger.debug(f"Register request: {sanitize_log_data(payload.model_dump(mode='json'))}")
    email = payload.email.lower()
    if db.query(User.id).filter(User.email == email).first():
        raise ConflictError("User already exists with this email.", fields=["email"])

    user = User(
        fullname=payload.fullname.strip(),
        email=email,
        phone_number=payload.phone_number,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User registered: user_id={user.id}, role={user.role.value}")
    return user


# ✅ OAUTH2 LOGIN (Swagger sends "username", treated as the email)
@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.email == form_data.username.strip().lower()).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning("Login failed: invalid credentials")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer"}


# ✅ CURRENT USER
@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user_obj)):
    return user


# ✅ RESUME UPLOAD
@router.post("/profile/resume", response_model=UserResponse)
async def upload_resume(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    await _store_resume(user, file)
    db.commit()
    db.refresh(user)

    logger.info(f"Resume uploaded: user_id={user.id}")
    return user


# ✅ PROFILE UPDATE (multipart: fields plus optional photo and resume)
@router.post("/profile/update", response_model=UserResponse)
async def update_profile(
    fullname: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    profile_photo: Optional[UploadFile] = File(None),
    resume: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    # Blank fields leave the stored value alone
    if fullname and fullname.strip():
        user.fullname = fullname.strip()
    if email and email.strip():
        try:
            email = validate_email(email.strip(), check_deliverability=False).normalized.lower()
        except EmailNotValidError:
            raise ValidationError("Please provide a valid email address.", fields=["email"])
        if email != user.email:
            taken = db.query(User.id).filter(User.email == email, User.id != user.id).first()
            if taken:
                raise ConflictError("User already exists with this email.", fields=["email"])
            user.email = email
    if phone_number and phone_number.strip():
        user.phone_number = phone_number.strip()
    if bio and bio.strip():
        user.bio = bio.strip()
    if skills:
        user.skills = parse_requirements(skills).value or []

    if profile_photo is not None and profile_photo.filename:
        photo_name = profile_photo.filename
        if Path(photo_name).suffix.lower() not in IMAGE_EXTENSIONS:
            raise ValidationError("Profile photo must be a PNG, JPEG, GIF or WebP image.", fields=["profile_photo"])
        user.profile_photo_url = save_upload(await profile_photo.read(), photo_name, "profile")

    if resume is not None and resume.filename:
        await _store_resume(user, resume)

    db.commit()
    db.refresh(user)

    logger.info(f"Profile updated: user_id={user.id}")
    return user


async def _store_resume(user: User, file: UploadFile) -> None:
    filename = file.filename or ""
    if Path(filename).suffix.lower() not in RESUME_EXTENSIONS:
        raise ValidationError("Resume must be a PDF or Word document.", fields=["file"])

    user.resume_url = save_upload(await file.read(), filename, "resume")
    user.resume_original_name = filename
