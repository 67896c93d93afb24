"""
Quote routes.

Handles:
- /api/draft - The current draft (read, change header fields, discard)
- /api/draft/items - Add, change and remove line items
- /api/draft/commit - Save the draft as a quote and deduct stock
- /api/draft/autosave - Autosave status, save now, restore stored draft
- /api/quotes - Saved quote history (filters, delete, edit, WhatsApp link)

Stock rejections answer 409 with the shortfalls in "details".
"""

from datetime import date

from flask import Blueprint, current_app, request

from core.exceptions import QuoteValidationError
from models.quote import coerce_quantity, parse_quantity
from logging_config import get_logger
from .common import json_body, sanitize_text, service


# Module logger
logger = get_logger(__name__)

quotes_bp = Blueprint("quotes", __name__, url_prefix="/api")


def _draft_response():
    """Current draft with totals (2-decimal strings) and autosave status."""
    quote_service = service("QUOTE_SERVICE")
    data = quote_service.draft.to_dict()
    data["totals"] = quote_service.totals().to_display_dict()
    data["autosave"] = service("AUTOSAVER").status
    return data


def _checked_quantity(quantity: int) -> int:
    """Reject quantities above MAX_QUANTITY (400)."""
    max_quantity = current_app.config.get("MAX_QUANTITY", 100000)
    if quantity > max_quantity:
        raise QuoteValidationError(
            f"Quantity cannot exceed {max_quantity}",
            {"quantity": quantity, "max_quantity": max_quantity},
        )
    return quantity


# =============================================================================
# DRAFT
# =============================================================================

@quotes_bp.route("/draft", methods=["GET"])
def get_draft():
    return _draft_response()


@quotes_bp.route("/draft", methods=["PATCH"])
def update_draft():
    """
    Change draft header fields.

    Accepts any of: selectedClientId, notes, discount + discountType,
    quoteDate (YYYY-MM-DD).
    """
    data = json_body()
    quote_service = service("QUOTE_SERVICE")

    if "selectedClientId" in data:
        quote_service.select_client(sanitize_text(data["selectedClientId"]))

    if "notes" in data:
        max_length = current_app.config.get("MAX_NOTES_LENGTH", 2000)
        quote_service.set_notes(sanitize_text(data["notes"], max_length=max_length))

    if "discount" in data or "discountType" in data:
        current = quote_service.draft.discount
        quote_service.set_discount(
            data.get("discountType", current.kind.value),
            data.get("discount", current.amount),
        )

    if "quoteDate" in data:
        try:
            quote_date = date.fromisoformat(str(data["quoteDate"]))
        except ValueError:
            raise QuoteValidationError(
                "Quote date must be YYYY-MM-DD", {"quoteDate": data["quoteDate"]}
            )
        quote_service.set_quote_date(quote_date)

    return _draft_response()


@quotes_bp.route("/draft", methods=["DELETE"])
def discard_draft():
    """Start a new, empty draft (the stored draft is removed)."""
    service("QUOTE_SERVICE").new_draft()
    return _draft_response()


@quotes_bp.route("/draft/items", methods=["POST"])
def add_item():
    data = json_body()
    decision = service("QUOTE_SERVICE").add_item(
        sanitize_text(data.get("itemId")),
        _checked_quantity(parse_quantity(data.get("quantity", 1))),
    )
    decision.raise_if_rejected()
    return _draft_response(), 201


@quotes_bp.route("/draft/items/<item_id>", methods=["PUT"])
def update_item(item_id: str):
    quantity = _checked_quantity(coerce_quantity(json_body().get("quantity")))
    decision = service("QUOTE_SERVICE").update_quantity(item_id, quantity)
    decision.raise_if_rejected()
    return _draft_response()


@quotes_bp.route("/draft/items/<item_id>", methods=["DELETE"])
def remove_item(item_id: str):
    service("QUOTE_SERVICE").remove_item(item_id)
    return _draft_response()


@quotes_bp.route("/draft/commit", methods=["POST"])
def commit_draft():
    """
    Save the draft as a quote.

    201 on a new commit, 200 if the draft was already committed, 409 with
    the shortfalls if stock is insufficient.
    """
    result = service("QUOTE_SERVICE").commit()
    if not result.committed:
        logger.info(f"Commit refused: {result.decision.reason}")
        result.decision.raise_if_rejected()

    status_code = 200 if result.already_committed else 201
    return result.to_dict(), status_code


@quotes_bp.route("/draft/autosave", methods=["GET"])
def autosave_status():
    autosaver = service("AUTOSAVER")
    return {
        "status": autosaver.status,
        "pending": autosaver.has_pending,
        "stored": autosaver.exists(),
    }


@quotes_bp.route("/draft/autosave", methods=["POST"])
def autosave_now():
    """Write the current draft to storage immediately."""
    autosaver = service("AUTOSAVER")
    autosaver.schedule(service("QUOTE_SERVICE").draft)
    autosaver.flush()
    return {"status": autosaver.status, "pending": False, "stored": True}


@quotes_bp.route("/draft/restore", methods=["POST"])
def restore_draft():
    """Replace the current draft with the stored one."""
    if service("QUOTE_SERVICE").load_draft() is None:
        return {"error": "No stored draft", "details": {}}, 404
    return _draft_response()


# =============================================================================
# SAVED QUOTES
# =============================================================================

@quotes_bp.route("/quotes", methods=["GET"])
def list_quotes():
    """Saved quotes, newest first. Query params: name, date, value."""
    quotes = service("QUOTE_SERVICE").list_quotes(
        name=request.args.get("name", ""),
        date_text=request.args.get("date", ""),
        value=request.args.get("value", ""),
    )
    return {"quotes": [q.to_dict() for q in quotes]}


@quotes_bp.route("/quotes/<quote_id>", methods=["GET"])
def get_quote(quote_id: str):
    return service("QUOTE_SERVICE").get_quote(quote_id).to_dict()


@quotes_bp.route("/quotes/<quote_id>", methods=["DELETE"])
def delete_quote(quote_id: str):
    service("QUOTE_SERVICE").delete_quote(quote_id)
    return "", 204


@quotes_bp.route("/quotes/<quote_id>/edit", methods=["POST"])
def edit_quote(quote_id: str):
    """Reopen a saved quote as the current draft."""
    service("QUOTE_SERVICE").edit_quote(quote_id)
    return _draft_response()


@quotes_bp.route("/quotes/<quote_id>/whatsapp", methods=["GET"])
def whatsapp_link(quote_id: str):
    url = service("QUOTE_SERVICE").whatsapp_url(
        quote_id,
        currency=current_app.config.get("CURRENCY_SYMBOL", "R$"),
        country_code=current_app.config.get("WHATSAPP_COUNTRY_CODE", "55"),
    )
    return {"url": url}
