from fastapi import APIRouter, Depends, HTTPException
from app import schemas
from app.deps import get_current_user, get_company_id
from app.services.companies import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])

@router.post("/", response_model=schemas.CompanyOut, status_code=201)
async def create_company(payload: schemas.CompanyCreate, user=Depends(get_current_user)):
    if user["company_id"] is not None:
        raise HTTPException(status_code=400, detail="User already belongs to a company")
    return await CompanyService().create(payload, owner_id=user["id"])

@router.get("/me", response_model=schemas.CompanyOut)
async def get_my_company(company_id: int = Depends(get_company_id)):
    company = await CompanyService().get_by_id(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company

@router.put("/me", response_model=schemas.CompanyOut)
async def update_my_company(payload: schemas.CompanyUpdate, company_id: int = Depends(get_company_id)):
    company = await CompanyService().update(company_id, payload)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company

@router.delete("/me", status_code=204)
async def delete_my_company(company_id: int = Depends(get_company_id)):
    if not await CompanyService().delete(company_id):
        raise HTTPException(status_code=404, detail="Company not found")
    return None
