from fastapi import APIRouter, Depends, HTTPException
from app import schemas
from app.deps import get_company_id
from app.services.catalog import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])

@router.get("/", response_model=list[schemas.CustomerOut])
async def list_customers(company_id: int = Depends(get_company_id)):
    return await CustomerService().list_by_company(company_id)

@router.post("/", response_model=schemas.CustomerOut, status_code=201)
async def create_customer(payload: schemas.CustomerCreate, company_id: int = Depends(get_company_id)):
    return await CustomerService().create(payload, company_id)

@router.get("/{customer_id}", response_model=schemas.CustomerOut)
async def get_customer(customer_id: int, company_id: int = Depends(get_company_id)):
    row = await CustomerService().get_by_id(customer_id, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="Customer not found")
    return row

@router.put("/{customer_id}", response_model=schemas.CustomerOut)
async def update_customer(customer_id: int, payload: schemas.CustomerUpdate, company_id: int = Depends(get_company_id)):
    row = await CustomerService().update(customer_id, payload, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="Customer not found")
    return row

@router.delete("/{customer_id}", status_code=204)
async def delete_customer(customer_id: int, company_id: int = Depends(get_company_id)):
    if not await CustomerService().delete(customer_id, company_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return None
