"""HTTP client for the external OCR service."""

import time
from typing import Any

import httpx

from tabsplit.runtime.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OCR_URL = "http://localhost:8001"


class OCRServiceUnavailable(RuntimeError):
    """Raised when the OCR service cannot be reached or returns an error."""


def ocr_result_text(result: dict[str, Any]) -> str:
    """
    Pull the transcript out of an OCR service response.

    Uses ``full_text`` when present, else joins the text of every detection
    (``[bbox, [text, confidence]]`` or ``{"text": ...}``) with newlines.
    """
    full_text = result.get("full_text")
    if isinstance(full_text, str) and full_text.strip():
        return full_text

    texts: list[str] = []
    for detection in result.get("detections") or []:
        if isinstance(detection, dict):
            text = detection.get("text")
        elif isinstance(detection, (list, tuple)) and len(detection) >= 2 and isinstance(detection[1], (list, tuple)):
            text = detection[1][0] if detection[1] else None
        else:
            text = None
        if isinstance(text, str) and text:
            texts.append(text)
    return "\n".join(texts)


def extract_receipt_text(image_bytes: bytes, filename: str, ocr_url: str) -> str:
    """
    Send a receipt image to the OCR service and return its transcript.

    Raises:
        OCRServiceUnavailable: if the service cannot be reached, answers with a
            non-200 status or returns something other than a JSON object.
    """
    ocr_url = ocr_url.rstrip("/")
    logger.info("Sending receipt to OCR service at %s...", ocr_url)

    try:
        start_time = time.time()
        response = httpx.post(
            f"{ocr_url}/ocr",
            files={"file": (filename, image_bytes, "application/octet-stream")},
            timeout=60.0,
        )
        elapsed_time = time.time() - start_time
        logger.info("OCR service returned in %.2f seconds", elapsed_time)
    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e

    if response.status_code != 200:
        logger.error("OCR service error: %s", response.status_code)
        raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

    try:
        result = response.json()
    except ValueError as e:
        logger.error("OCR service returned invalid JSON: %s", e)
        raise OCRServiceUnavailable("OCR service returned invalid JSON") from e
    if not isinstance(result, dict):
        raise OCRServiceUnavailable("OCR service returned an unexpected payload")

    return ocr_result_text(result)
