from sqlalchemy import Column, Integer, String, ForeignKey, BigInteger, DateTime, UniqueConstraint, Date
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db import Base

# Montants stockés en centimes (BigInteger), jamais en float.

class Company(Base):
    __tablename__ = "companies"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    address = Column(String(500), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(100), nullable=False)
    tax_number = Column(String(50), nullable=True)
    iban = Column(String(50), nullable=True)
    website = Column(String(200), nullable=True)
    logo = Column(String(500), nullable=True)
    offers_used = Column(Integer, nullable=False, default=0, server_default="0")
    users = relationship("User", back_populates="company", passive_deletes=True)
    customers = relationship("Customer", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    products = relationship("Product", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    offers = relationship("Offer", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    payments = relationship("Payment", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    company = relationship("Company", back_populates="users")
    offers = relationship("Offer", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    email = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    company = relationship("Company", back_populates="customers")

class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    category = Column(String(100), nullable=True)
    price_cents = Column(BigInteger, nullable=False, default=0)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    company = relationship("Company", back_populates="products")

class Offer(Base):
    __tablename__ = "offers"
    id = Column(Integer, primary_key=True, index=True)
    offer_number = Column(String(50), nullable=False, index=True)          # ex: OFF-2025-0001
    # instantané du client au moment de l'offre, pas de FK vers customers
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=True)
    customer_address = Column(String(500), nullable=False)
    offer_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    total_amount_cents = Column(BigInteger, nullable=False, default=0)
    notes = Column(String(2000), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    user = relationship("User", back_populates="offers")
    company = relationship("Company", back_populates="offers")
    items = relationship(
        "OfferItem", back_populates="offer", cascade="all, delete-orphan",
        passive_deletes=True, order_by="OfferItem.position",
    )
    __table_args__ = (
        UniqueConstraint("company_id", "offer_number", name="uq_offer_company_number"),
    )

class OfferItem(Base):
    __tablename__ = "offer_items"
    id = Column(Integer, primary_key=True, index=True)
    offer_id = Column(Integer, ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(500), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_cents = Column(BigInteger, nullable=False, default=0)
    total_price_cents = Column(BigInteger, nullable=False, default=0)
    offer = relationship("Offer", back_populates="items")

class Payment(Base):
    __tablename__ = "payments"
    id = Column(Integer, primary_key=True, index=True)
    amount_cents = Column(BigInteger, nullable=False, default=0)
    method = Column(String(50), nullable=True)       # cash/card/transfer/...
    paid_at = Column(Date, nullable=True)
    note = Column(String(500), nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    company = relationship("Company", back_populates="payments")
