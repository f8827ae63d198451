import io

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from app import schemas
from app.deps import get_current_user, get_company_id, get_mailer
from app.documents import offer_pdf_filename, render_offer_pdf, send_offer
from app.mailer import Mailer
from app.services.offers import OfferService, OfferNumberTaken

router = APIRouter(prefix="/offers", tags=["offers"])


@router.get("/", response_model=list[schemas.OfferOut])
async def list_offers(company_id: int = Depends(get_company_id)):
    return await OfferService().list_by_company(company_id)


@router.post("/", response_model=schemas.OfferOut, status_code=201)
async def create_offer(
    payload: schemas.OfferCreate,
    user=Depends(get_current_user),
    company_id: int = Depends(get_company_id),
):
    try:
        return await OfferService().create(payload, company_id, user_id=user["id"])
    except OfferNumberTaken as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{offer_id}", response_model=schemas.OfferOut)
async def get_offer(offer_id: int, company_id: int = Depends(get_company_id)):
    offer = await OfferService().get_by_id(offer_id, company_id)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return offer


@router.put("/{offer_id}", response_model=schemas.OfferOut)
async def update_offer(offer_id: int, payload: schemas.OfferUpdate, company_id: int = Depends(get_company_id)):
    try:
        offer = await OfferService().update(offer_id, payload, company_id)
    except OfferNumberTaken as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return offer


@router.delete("/{offer_id}", status_code=204)
async def delete_offer(offer_id: int, company_id: int = Depends(get_company_id)):
    if not await OfferService().delete(offer_id, company_id):
        raise HTTPException(status_code=404, detail="Offer not found")
    return None


@router.get("/{offer_id}/download.pdf")
async def download_offer_pdf(offer_id: int, company_id: int = Depends(get_company_id)):
    doc = await OfferService().load_document(offer_id, company_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Offer not found")
    pdf_bytes = await run_in_threadpool(render_offer_pdf, doc)
    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{offer_pdf_filename(doc)}"'},
    )


@router.post("/{offer_id}/send", response_model=schemas.DeliveryOut)
async def send_offer_email(
    offer_id: int,
    company_id: int = Depends(get_company_id),
    mailer: Mailer = Depends(get_mailer),
):
    doc = await OfferService().load_document(offer_id, company_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Offer not found")
    result = await run_in_threadpool(send_offer, doc, mailer)
    if not result.ok:
        raise HTTPException(
            status_code=502,
            detail={"delivered": False, "recipient": doc.customer_email, "reason": result.reason.value},
        )
    return {"delivered": True, "recipient": doc.customer_email}
