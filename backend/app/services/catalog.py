from app import models, schemas
from app.services.tenant import TenantService


class ProductService(TenantService):
    model = models.Product
    view = schemas.ProductOut
    fields = ("name", "description", "category")
    money_fields = {"price": "price_cents"}


class CustomerService(TenantService):
    model = models.Customer
    view = schemas.CustomerOut
    fields = ("name", "email", "phone", "address")


class PaymentService(TenantService):
    model = models.Payment
    view = schemas.PaymentOut
    fields = ("method", "paid_at", "note")
    money_fields = {"amount": "amount_cents"}
