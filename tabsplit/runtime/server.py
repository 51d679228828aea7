"""FastAPI server for the table session: people, orders, receipts and splits."""

import json
import os
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from tabsplit.application.orders import (
    OrderTextRequest,
    OrderUpdateRequest,
    run_clear_orders,
    run_order_delete,
    run_order_text,
    run_order_update,
)
from tabsplit.application.receipts import (
    ReceiptImageRequest,
    ReceiptProcessResult,
    ReceiptTextRequest,
    run_list_receipts,
    run_receipt_image,
    run_receipt_text,
)
from tabsplit.application.roster import add_person, remove_person, rename_person
from tabsplit.application.split import SplitRequest, run_split
from tabsplit.domain.errors import ParseError
from tabsplit.domain.receipt import ReceiptRecord
from tabsplit.receipt.formatter import (
    bill_split_to_dict,
    order_line_to_dict,
    person_to_dict,
    receipt_item_to_dict,
    split_result_to_dict,
    totals_to_dict,
)
from tabsplit.receipt.numbers import format_amount, normalize_amount
from tabsplit.runtime.logging import get_logger
from tabsplit.runtime.ocr_client import DEFAULT_OCR_URL
from tabsplit.runtime.session_store import SessionStore
from tabsplit.split.tip import FixedCashAmount, NoTip, PercentOfSubtotal, TipPolicy

logger = get_logger(__name__)

OCR_SERVICE_URL = os.environ.get("OCR_SERVICE_URL", DEFAULT_OCR_URL)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


async def _read_json(request: Request) -> dict[str, Any] | None:
    """Request body as a JSON object; None for an empty, invalid or non-object body."""
    body = await request.body()
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _decimal_field(value: Any, name: str) -> Decimal:
    try:
        return normalize_amount(str(value))
    except ParseError as exc:
        raise ValueError(f"Invalid {name}: {value!r}") from exc


def tip_policy_from_fields(fields: Mapping[str, Any]) -> TipPolicy | None:
    """
    Read a tip policy from request fields.

    ``tip_percent`` and ``tip_amount`` are exclusive; ``tip_from_receipt`` (or
    no tip field at all) returns None so the receipt decides.

    Raises:
        ValueError: for conflicting, malformed or negative values.
    """
    percent = fields.get("tip_percent")
    amount = fields.get("tip_amount")
    if percent not in (None, "") and amount not in (None, ""):
        raise ValueError("Use either tip_percent or tip_amount, not both")
    if percent not in (None, ""):
        return PercentOfSubtotal(_decimal_field(percent, "tip_percent"))
    if amount not in (None, ""):
        return FixedCashAmount(_decimal_field(amount, "tip_amount"))
    return None


def receipt_record_to_dict(record: ReceiptRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "file_name": record.file_name,
        "ocr_text": record.ocr_text,
        "items": [receipt_item_to_dict(item) for item in record.items],
        "totals": totals_to_dict(record.totals),
        "split_results": [split_result_to_dict(result) for result in record.split_results],
        "total_tip": format_amount(record.total_tip),
        "processed_at": record.processed_at.isoformat() if record.processed_at else None,
    }


def _receipt_response(result: ReceiptProcessResult) -> JSONResponse:
    if result.status == "ocr_unavailable":
        return _error(result.error or "OCR service unavailable", 503)
    if result.status != "processed" or result.bill is None or result.record is None:
        return _error(result.error or "Receipt processing failed", 400)
    return JSONResponse(
        {
            "success": True,
            "receipt": receipt_record_to_dict(result.record),
            "split": bill_split_to_dict(result.bill),
            "updated_count": result.updated_count,
            "message": f"Receipt processed; {result.updated_count} order line(s) priced",
        }
    )


def create_app(store: SessionStore | None = None, ocr_url: str | None = None) -> FastAPI:
    """Build the API app around one in-memory session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Session started (OCR service at %s)", app.state.ocr_url)
        yield

    app = FastAPI(title="Tabsplit", lifespan=lifespan)
    app.state.store = store or SessionStore()
    app.state.ocr_url = ocr_url or OCR_SERVICE_URL

    def _store() -> SessionStore:
        return app.state.store

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    # --- People ---
    @app.get("/api/people")
    async def list_people() -> JSONResponse:
        return JSONResponse([person_to_dict(person) for person in _store().list_people()])

    @app.post("/api/people")
    async def create_person(request: Request) -> JSONResponse:
        data = await _read_json(request)
        if data is None:
            return _error("Invalid JSON body", 400)
        result = add_person(_store(), data.get("name", ""))
        if result.person is None:
            return _error(result.error or "Invalid person", 400)
        status_code = 201 if result.status == "created" else 200
        return JSONResponse({"success": True, "person": person_to_dict(result.person)}, status_code=status_code)

    @app.patch("/api/people/{person_id}")
    async def update_person(person_id: str, request: Request) -> JSONResponse:
        data = await _read_json(request)
        if data is None:
            return _error("Invalid JSON body", 400)
        result = rename_person(_store(), person_id, data.get("name", ""))
        if result.status == "not_found":
            return _error(result.error or "Person not found", 404)
        if result.person is None or result.status != "renamed":
            return _error(result.error or "Invalid person", 400)
        return JSONResponse({"success": True, "person": person_to_dict(result.person)})

    @app.delete("/api/people/{person_id}")
    async def delete_person(person_id: str) -> JSONResponse:
        result = remove_person(_store(), person_id)
        if result.status == "not_found":
            return _error(result.error or "Person not found", 404)
        return JSONResponse({"success": True, "removed_orders": result.removed_orders})

    # --- Orders ---
    @app.get("/api/orders")
    async def list_orders() -> JSONResponse:
        return JSONResponse([order_line_to_dict(line) for line in _store().list_orders()])

    @app.post("/api/chat")
    async def chat(request: Request) -> JSONResponse:
        """Turn one order utterance into stored order lines."""
        data = await _read_json(request)
        if data is None:
            return _error("Invalid JSON body", 400)
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            return _error("Order text is required", 400)

        result = run_order_text(_store(), OrderTextRequest(text=text))
        if result.status != "created":
            return _error(result.error or "No orders found", 422)
        return JSONResponse(
            {
                "success": True,
                "orders": [order_line_to_dict(line) for line in result.lines],
                "people": [person_to_dict(person) for person in result.new_people],
                "message": f"Added {len(result.lines)} order(s)",
            }
        )

    @app.patch("/api/orders/{order_id}")
    async def update_order(order_id: str, request: Request) -> JSONResponse:
        data = await _read_json(request)
        if data is None:
            return _error("Invalid JSON body", 400)

        quantity = data.get("quantity")
        delta = data.get("delta")
        for name, value in (("quantity", quantity), ("delta", delta)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                return _error(f"{name} must be an integer", 400)

        person_name = data.get("person_name")
        if person_name is not None and not isinstance(person_name, str):
            return _error("person_name must be a string", 400)

        result = run_order_update(
            _store(),
            OrderUpdateRequest(
                order_id=order_id,
                quantity=quantity,
                delta=delta,
                person_name=person_name,
                unassign="person_name" in data and person_name is None,
            ),
        )
        if result.status == "not_found":
            return _error(result.error or "Order not found", 404)
        if result.status == "invalid":
            return _error(result.error or "Invalid update", 400)
        if result.status == "deleted":
            return JSONResponse({"success": True, "deleted": True})
        if result.line is None:
            return _error("Order not found", 404)
        return JSONResponse({"success": True, "order": order_line_to_dict(result.line)})

    @app.delete("/api/orders/{order_id}")
    async def delete_order(order_id: str) -> JSONResponse:
        result = run_order_delete(_store(), order_id)
        if result.status == "not_found":
            return _error(result.error or "Order not found", 404)
        return JSONResponse({"success": True})

    @app.delete("/api/orders")
    async def clear_orders() -> JSONResponse:
        count = run_clear_orders(_store())
        return JSONResponse({"success": True, "message": f"Cleared {count} order(s)"})

    # --- Receipts ---
    @app.post("/api/receipt")
    async def upload_receipt(request: Request) -> JSONResponse:
        """Process a receipt image (through OCR) or a ``text`` form field."""
        form = await request.form()

        try:
            tip_policy = tip_policy_from_fields(form)
        except ValueError as exc:
            return _error(str(exc), 400)
        use_estimates = _flag(form.get("use_estimates", ""))

        file = None
        for key, value in form.items():
            logger.debug("Form field: key=%r, type=%s", key, type(value))
            if hasattr(value, "read"):
                file = value
                break

        if file is not None:
            contents = await file.read()
            if not contents:
                return _error("Uploaded file is empty", 400)
            file_name = getattr(file, "filename", None) or "receipt.jpg"
            result = await run_in_threadpool(
                run_receipt_image,
                _store(),
                ReceiptImageRequest(
                    image_bytes=contents,
                    file_name=file_name,
                    ocr_url=app.state.ocr_url,
                    tip_policy=tip_policy,
                    use_estimates=use_estimates,
                ),
            )
            return _receipt_response(result)

        text = form.get("text")
        if not isinstance(text, str):
            return _error("No file or text found in request", 400)
        result = run_receipt_text(
            _store(),
            ReceiptTextRequest(
                ocr_text=text,
                file_name=str(form.get("file_name") or "receipt.txt"),
                tip_policy=tip_policy,
                use_estimates=use_estimates,
            ),
        )
        return _receipt_response(result)

    @app.get("/api/receipts")
    async def list_receipts() -> JSONResponse:
        history = run_list_receipts(_store())
        return JSONResponse([receipt_record_to_dict(record) for record in history.receipts])

    # --- Split ---
    @app.post("/api/split")
    async def split(request: Request) -> JSONResponse:
        data = await _read_json(request)
        if data is None:
            return _error("Invalid JSON body", 400)
        try:
            tip_policy = tip_policy_from_fields(data) or NoTip()
        except ValueError as exc:
            return _error(str(exc), 400)

        result = run_split(
            _store(),
            SplitRequest(tip_policy=tip_policy, use_estimates=_flag(data.get("use_estimates", False))),
        )
        if result.bill is None:
            return _error(result.error or "Nothing to split", 400)
        return JSONResponse({"success": True, "split": bill_split_to_dict(result.bill)})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
