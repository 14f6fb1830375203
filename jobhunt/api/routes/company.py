import logging
from pathlib import Path
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from jobhunt.core.auth_dependency import get_current_user_obj
from jobhunt.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from jobhunt.db.models.company import Company
from jobhunt.db.models.user import User, UserRole
from jobhunt.db.session import get_db
from jobhunt.schemas.company import CompanyCreate, CompanyResponse
from jobhunt.services.storage_service import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/company", tags=["Company"])

LOGO_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg")


@router.post("/register", status_code=201, response_model=CompanyResponse)
def register_company(
    payload: CompanyCreate,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    if user.role != UserRole.EMPLOYER:
        raise AuthorizationError("Only employers can register companies.")

    name = payload.name.strip()
    if db.query(Company.id).filter(Company.name == name).first():
        raise ConflictError("A company with this name is already registered.", fields=["name"])

    company = Company(
        name=name,
        user_id=user.id,
        description=payload.description,
        website=payload.website,
        location=payload.location,
    )
    db.add(company)
    db.commit()
    db.refresh(company)

    logger.info(f"Company registered: company_id={company.id}, user_id={user.id}")
    return company


@router.get("/get", response_model=List[CompanyResponse])
def get_my_companies(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    return (
        db.query(Company)
        .filter(Company.user_id == user.id)
        .order_by(Company.created_at.desc(), Company.id.desc())
        .all()
    )


@router.get("/get/{company_id}", response_model=CompanyResponse)
def get_company(
    company_id: int,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise NotFoundError("Company not found.")
    return company


# ✅ UPDATE (multipart: fields plus optional logo)
@router.put("/update/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise NotFoundError("Company not found.")
    if company.user_id != user.id:
        logger.warning(f"Company edit refused: company_id={company_id}, user_id={user.id} is not the owner")
        raise AuthorizationError("You are not authorized to update this company.")

    if name and name.strip() and name.strip() != company.name:
        name = name.strip()
        taken = db.query(Company.id).filter(Company.name == name, Company.id != company.id).first()
        if taken:
            raise ConflictError("A company with this name is already registered.", fields=["name"])
        company.name = name
    if description is not None:
        company.description = description.strip() or None
    if website is not None:
        company.website = website.strip() or None
    if location is not None:
        company.location = location.strip() or None

    if logo is not None and logo.filename:
        if Path(logo.filename).suffix.lower() not in LOGO_EXTENSIONS:
            raise ValidationError("Logo must be a PNG, JPEG, GIF, WebP or SVG image.", fields=["logo"])
        company.logo_url = save_upload(await logo.read(), logo.filename, "logo")

    db.commit()
    db.refresh(company)

    logger.info(f"Company updated: company_id={company.id}, user_id={user.id}")
    return company
