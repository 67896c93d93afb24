"""
WhatsApp quote summary.

Builds the plain-text summary of a saved quote and the wa.me link that opens
a chat with the client, pre-filled with that summary. WhatsApp renders
*text* in bold.

Message Format:
    Hello *Maria Silva*, here is the summary of your quote (05/03/2025):

    • 3x Cable 2.5mm: R$ 30.00
    • 1x Installation: R$ 50.00

    Subtotal: R$ 80.00
    Discount: - R$ 5.00
    *Total: R$ 75.00*

    Regards, *Acme Electric*
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote as url_quote

from core.exceptions import ClientPhoneMissingError
from models.money import ZERO, format_money
from models.quote import SavedQuote

WHATSAPP_BASE_URL = "https://wa.me"


def normalize_phone(raw: str, country_code: str = "55") -> str:
    """
    Reduce a phone number to digits, adding the country code to local numbers.

    Numbers with 10 or 11 digits (area code + number) are treated as local
    and get the country code prefixed. Anything else is returned as digits.

    Args:
        raw: Phone as typed (spaces, dashes, parentheses allowed)
        country_code: Digits to prefix to local numbers

    Returns:
        Digits only, possibly empty
    """
    digits = re.sub(r"\D", "", raw or "")
    if 10 <= len(digits) <= 11:
        digits = f"{country_code}{digits}"
    return digits


def build_message(
    quote: SavedQuote,
    company_name: Optional[str] = None,
    show_discount: bool = True,
    currency: str = "R$",
) -> str:
    """
    Build the summary text for a saved quote.

    Subtotal and discount lines appear only when discounts are shown and the
    quote actually has one.
    """
    created = quote.created_at.strftime("%d/%m/%Y")
    message = f"Hello *{quote.client.name}*, here is the summary of your quote ({created}):\n\n"

    for line in quote.items:
        message += f"• {line.quantity}x {line.item.name}: {format_money(line.line_total, currency)}\n"

    totals = quote.totals
    if show_discount and totals.discount_amount > ZERO:
        message += f"\nSubtotal: {format_money(totals.subtotal, currency)}"
        message += f"\nDiscount: - {format_money(totals.discount_amount, currency)}"

    message += f"\n*Total: {format_money(totals.final_total, currency)}*"

    if company_name:
        message += f"\n\nRegards, *{company_name}*"

    return message


def build_whatsapp_url(
    quote: SavedQuote,
    company_name: Optional[str] = None,
    show_discount: bool = True,
    currency: str = "R$",
    country_code: str = "55",
) -> str:
    """
    Build the wa.me link for a saved quote.

    Raises:
        ClientPhoneMissingError: If the quote's client has no usable phone
    """
    phone = normalize_phone(quote.client.phone, country_code)
    if not phone:
        raise ClientPhoneMissingError(quote.client.name)

    text = build_message(quote, company_name, show_discount, currency)
    return f"{WHATSAPP_BASE_URL}/{phone}?text={url_quote(text, safe='')}"
