from fastapi import APIRouter, HTTPException, Depends
from app import schemas
from app.auth_utils import verify_password, create_access_token
from app.deps import get_current_user
from app.services.users import UserService, EmailAlreadyRegistered

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=schemas.Token)
async def register(payload: schemas.UserCreate):
    try:
        user_id = await UserService().create(payload.email, payload.password)
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=400, detail="Email already registered")
    # pas encore de société : POST /companies/ ensuite
    token = create_access_token(sub=payload.email, user_id=user_id, company_id=None)
    return {"access_token": token}

@router.post("/login", response_model=schemas.Token)
async def login(payload: schemas.UserLogin):
    row = await UserService().get_by_email(payload.email)
    if not row or not verify_password(payload.password, row["hashed_password"]):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    token = create_access_token(sub=row["email"], user_id=row["id"], company_id=row["company_id"])
    return {"access_token": token}

@router.get("/me", response_model=schemas.MeOut)
async def me(user=Depends(get_current_user)):
    return user
