"""HTML email body and PDF rendering of an offer.

The renderers are pure functions of an :class:`~app.schemas.OfferDocument`;
delivery happens only after both documents have been produced.
"""
from __future__ import annotations

import os
from html import escape

from dotenv import load_dotenv

from app.mailer import Attachment, DeliveryResult, Mailer
from app.money import format_money
from app.schemas import OfferDocument

load_dotenv()
DEFAULT_CURRENCY = os.getenv("OFFER_CURRENCY", "EUR")


def _e(value) -> str:
    return escape("" if value is None else str(value))


def _rows_html(doc: OfferDocument, currency: str) -> str:
    return "".join(
        f"<tr><td>{_e(it.description)}</td>"
        f"<td style='text-align:center'>{it.quantity}</td>"
        f"<td style='text-align:right'>{_e(format_money(it.unit_price, currency))}</td>"
        f"<td style='text-align:right'>{_e(format_money(it.total_price, currency))}</td></tr>"
        for it in doc.items
    )


def offer_subject(doc: OfferDocument) -> str:
    return f"Offer - {doc.offer_number}"


def offer_pdf_filename(doc: OfferDocument) -> str:
    return f"{doc.offer_number}.pdf"


def render_offer_email(doc: OfferDocument, currency: str = DEFAULT_CURRENCY) -> str:
    rows_html = _rows_html(doc, currency)
    return f"""
<html><body>
<h2>Offer: {_e(doc.offer_number)}</h2>
<p>Dear {_e(doc.customer_name)},</p>
<p>Please find below the offer we prepared following your request:</p>
<table border='1' style='border-collapse: collapse; width: 100%;'>
<tr><th>Description</th><th>Quantity</th><th>Unit price</th><th>Total</th></tr>
{rows_html}
</table>
<p><strong>Total amount: {_e(format_money(doc.total_amount, currency))}</strong></p>
<p>Offer valid until: {doc.due_date.strftime('%d/%m/%Y')}</p>
<p>Thank you.</p>
</body></html>
""".strip()


def build_offer_pdf_html(doc: OfferDocument, currency: str = DEFAULT_CURRENCY) -> str:
    company = doc.company
    rows_html = _rows_html(doc, currency)
    return f"""
<!doctype html>
<html>
<head>
<meta charset="utf-8"/>
<title>Offer {_e(doc.offer_number)}</title>
<style>
@page {{ size: A4; margin: 20px; }}
body {{ font-family: Arial, sans-serif; font-size: 12px; }}
h1 {{ font-size: 18px; margin-bottom: 0; }}
hr {{ margin: 10px 0; }}
table {{ width:100%; border-collapse: collapse; margin-top: 12px; }}
th {{ background: #e0e0e0; padding: 5px; font-weight: 600; }}
td {{ padding: 5px; border-bottom: 1px solid #e0e0e0; }}
tfoot td {{ font-weight: bold; }}
</style>
</head>
<body>
  <h1>{_e(company.name)}</h1>
  <div>{_e(company.address)}</div>
  <div>Phone: {_e(company.phone)}  Email: {_e(company.email)}</div>
  <hr/>
  <div><strong>Offer No: {_e(doc.offer_number)}</strong></div>
  <div>Date: {doc.offer_date.strftime('%d.%m.%Y')}</div>
  <div>Customer: {_e(doc.customer_name)}</div>
  <div>Address: {_e(doc.customer_address)}</div>
  <hr/>
  <table>
    <thead>
      <tr><th>Description</th><th style="width:50px">Qty</th><th style="width:80px">Unit price</th><th style="width:80px">Total</th></tr>
    </thead>
    <tbody>
      {rows_html or "<tr><td colspan='4' style='text-align:center'>No items</td></tr>"}
    </tbody>
    <tfoot>
      <tr><td colspan="3" style="text-align:right">Total</td><td style="text-align:right">{_e(format_money(doc.total_amount, currency))}</td></tr>
    </tfoot>
  </table>
</body>
</html>
""".strip()


def render_offer_pdf(doc: OfferDocument, currency: str = DEFAULT_CURRENCY) -> bytes:
    from weasyprint import HTML
    return HTML(string=build_offer_pdf_html(doc, currency), base_url=".").write_pdf()


def send_offer(doc: OfferDocument, mailer: Mailer, currency: str = DEFAULT_CURRENCY) -> DeliveryResult:
    # les deux rendus d'abord ; un échec d'envoi ne touche jamais l'offre
    body = render_offer_email(doc, currency)
    pdf = render_offer_pdf(doc, currency)
    return mailer.send(
        doc.customer_email,
        offer_subject(doc),
        body,
        Attachment(content=pdf, filename=offer_pdf_filename(doc)),
    )
