from fastapi import APIRouter, Depends, HTTPException
from app import schemas
from app.deps import get_company_id
from app.services.catalog import ProductService

router = APIRouter(prefix="/products", tags=["products"])

@router.get("/", response_model=list[schemas.ProductOut])
async def list_products(company_id: int = Depends(get_company_id)):
    return await ProductService().list_by_company(company_id)

@router.post("/", response_model=schemas.ProductOut, status_code=201)
async def create_product(payload: schemas.ProductCreate, company_id: int = Depends(get_company_id)):
    return await ProductService().create(payload, company_id)

@router.get("/{product_id}", response_model=schemas.ProductOut)
async def get_product(product_id: int, company_id: int = Depends(get_company_id)):
    row = await ProductService().get_by_id(product_id, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")
    return row

@router.put("/{product_id}", response_model=schemas.ProductOut)
async def update_product(product_id: int, payload: schemas.ProductUpdate, company_id: int = Depends(get_company_id)):
    row = await ProductService().update(product_id, payload, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")
    return row

@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: int, company_id: int = Depends(get_company_id)):
    if not await ProductService().delete(product_id, company_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return None
