from pydantic import BaseModel, EmailStr, Field
from typing import Annotated, Optional, List
from datetime import date
from decimal import Decimal

Money = Annotated[Decimal, Field(ge=0, max_digits=18, decimal_places=2)]

# ---- Auth ----
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class MeOut(BaseModel):
    id: int
    email: EmailStr
    company_id: Optional[int] = None

# ---- Companies ----
class CompanyBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=500)
    phone: str = Field(min_length=1, max_length=20)
    email: EmailStr
    tax_number: Optional[str] = Field(default=None, max_length=50)
    iban: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=200)
    logo: Optional[str] = Field(default=None, max_length=500)

class CompanyCreate(CompanyBase):
    pass

class CompanyUpdate(CompanyBase):
    pass

class CompanyOut(CompanyBase):
    id: int
    offers_used: int = 0

# ---- Customers ----
class CustomerBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)

class CustomerCreate(CustomerBase):
    pass

class CustomerUpdate(CustomerBase):
    pass

class CustomerOut(CustomerBase):
    id: int

# ---- Products ----
class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category: Optional[str] = Field(default=None, max_length=100)
    price: Money

class ProductCreate(ProductBase):
    pass

class ProductUpdate(ProductBase):
    pass

class ProductOut(ProductBase):
    id: int

# ---- Payments ----
class PaymentBase(BaseModel):
    amount: Money
    method: Optional[str] = Field(default=None, max_length=50)
    paid_at: Optional[date] = None
    note: Optional[str] = Field(default=None, max_length=500)

class PaymentCreate(PaymentBase):
    pass

class PaymentUpdate(PaymentBase):
    pass

class PaymentOut(PaymentBase):
    id: int

# ---- Offers ----
class OfferItemIn(BaseModel):
    description: str = Field(min_length=1, max_length=500)
    quantity: int = Field(ge=1)
    unit_price: Money

class OfferItemOut(OfferItemIn):
    id: int
    total_price: Decimal

class OfferBase(BaseModel):
    customer_name: str = Field(min_length=1, max_length=200)
    customer_email: EmailStr
    customer_phone: Optional[str] = Field(default=None, max_length=20)
    customer_address: str = Field(min_length=1, max_length=500)
    offer_date: date
    due_date: date
    notes: Optional[str] = Field(default=None, max_length=2000)

class OfferCreate(OfferBase):
    # numéro attribué automatiquement si absent
    offer_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    items: List[OfferItemIn] = Field(default_factory=list)

class OfferUpdate(OfferBase):
    offer_number: str = Field(min_length=1, max_length=50)
    items: List[OfferItemIn] = Field(default_factory=list)

class OfferOut(OfferBase):
    id: int
    offer_number: str
    total_amount: Decimal
    user_id: int
    items: List[OfferItemOut] = Field(default_factory=list)

class OfferDocument(OfferOut):
    """Offer with its company, as needed to render the email and the PDF."""
    company: CompanyOut

# ---- Delivery ----
class DeliveryOut(BaseModel):
    delivered: bool
    recipient: EmailStr
    reason: Optional[str] = None
