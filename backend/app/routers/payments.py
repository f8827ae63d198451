from fastapi import APIRouter, Depends, HTTPException
from app import schemas
from app.deps import get_company_id
from app.services.catalog import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])

@router.get("/", response_model=list[schemas.PaymentOut])
async def list_payments(company_id: int = Depends(get_company_id)):
    return await PaymentService().list_by_company(company_id)

@router.post("/", response_model=schemas.PaymentOut, status_code=201)
async def create_payment(payload: schemas.PaymentCreate, company_id: int = Depends(get_company_id)):
    return await PaymentService().create(payload, company_id)

@router.get("/{payment_id}", response_model=schemas.PaymentOut)
async def get_payment(payment_id: int, company_id: int = Depends(get_company_id)):
    row = await PaymentService().get_by_id(payment_id, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="Payment not found")
    return row

@router.put("/{payment_id}", response_model=schemas.PaymentOut)
async def update_payment(payment_id: int, payload: schemas.PaymentUpdate, company_id: int = Depends(get_company_id)):
    row = await PaymentService().update(payment_id, payload, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="Payment not found")
    return row

@router.delete("/{payment_id}", status_code=204)
async def delete_payment(payment_id: int, company_id: int = Depends(get_company_id)):
    if not await PaymentService().delete(payment_id, company_id):
        raise HTTPException(status_code=404, detail="Payment not found")
    return None
