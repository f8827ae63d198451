from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth_utils import decode_access_token
from app.mailer import Mailer, SmtpMailer
from app.services.users import UserService

_bearer = HTTPBearer()

async def get_current_user(creds: HTTPAuthorizationCredentials = Depends(_bearer)):
    try:
        payload = decode_access_token(creds.credentials)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
    # la société peut avoir changé (ou été supprimée) depuis l'émission du token
    row = await UserService().get_by_id(int(payload["uid"]))
    if not row:
        raise HTTPException(status_code=401, detail="Unknown user")
    company_id = row["company_id"]
    return {
        "id": int(row["id"]),
        "email": row["email"],
        "company_id": int(company_id) if company_id is not None else None,
    }

async def get_company_id(user=Depends(get_current_user)) -> int:
    if user.get("company_id") is None:
        raise HTTPException(status_code=403, detail="User is not attached to a company")
    return int(user["company_id"])

def get_mailer() -> Mailer:
    return SmtpMailer.from_env()
