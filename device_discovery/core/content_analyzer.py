"""
Response content classification for the Device Discovery Module.

Inspects an HTTP response (status, headers, body) and produces an
EndpointResult with JSON, OpenAPI/Swagger and SOAP/ONVIF flags.
"""

import json
import re
from typing import Any, Optional, Tuple

from .data_models import EndpointResult

SNIPPET_LENGTH = 512
MAX_JSON_KEYS = 10

IGNORABLE_SOAP_FAULT = "End of file or no input: message transfer interrupted"

TITLE_PATTERN = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
JSON_CONTENT_TYPE = re.compile(r"application/(?:[\w.-]+\+)?json", re.IGNORECASE)
SWAGGER_UI_ID = re.compile(r"""id\s*=\s*["']swagger-ui["']""", re.IGNORECASE)
SOAP_ENVELOPE = re.compile(r"<(?:[\w.-]+:)?Envelope\b", re.IGNORECASE)
SOAP_FAULT = re.compile(r"<(?:[\w.-]+:)?Fault\b", re.IGNORECASE)


def extract_title(body: Optional[str]) -> Optional[str]:
    """Return the first HTML <title>, whitespace-collapsed, or None."""
    if not body:
        return None
    match = TITLE_PATTERN.search(body)
    if not match:
        return None
    title = " ".join(match.group(1).split())
    return title or None


def looks_like_json(content_type: Optional[str], body: Optional[str]) -> bool:
    """JSON content type (including +json suffixes) or a body opening with { or [."""
    if content_type and JSON_CONTENT_TYPE.search(content_type):
        return True
    stripped = (body or "").lstrip()
    return stripped.startswith("{") or stripped.startswith("[")


def parse_json_keys(body: Optional[str]) -> Tuple[Optional[Any], Tuple[str, ...]]:
    """
    Parse a body as JSON and collect up to ten field names.

    Objects yield their top-level keys; arrays yield the keys of their first
    element when it is an object.

    Returns:
        Tuple of (parsed document or None, key tuple)
    """
    try:
        document = json.loads(body or "")
    except (ValueError, TypeError):
        return None, ()

    if isinstance(document, dict):
        return document, tuple(str(key) for key in list(document)[:MAX_JSON_KEYS])
    if isinstance(document, list) and document and isinstance(document[0], dict):
        return document, tuple(str(key) for key in list(document[0])[:MAX_JSON_KEYS])
    return document, ()


def is_soap(content_type: Optional[str], body: Optional[str]) -> bool:
    if content_type and "application/soap+xml" in content_type.lower():
        return True
    return bool(body and SOAP_ENVELOPE.search(body))


def analyze_response(
    url: str,
    status_code: Optional[int],
    content_type: Optional[str],
    server: Optional[str],
    body: Optional[str],
    snippet_length: int = SNIPPET_LENGTH,
) -> EndpointResult:
    """
    Classify one HTTP response.

    Args:
        url: Requested URL
        status_code: Response status (any status is classified)
        content_type: Content-Type header
        server: Server header
        body: Decoded response body
        snippet_length: Maximum snippet length

    Returns:
        EndpointResult with all classification flags set
    """
    body = body or ""

    is_json = looks_like_json(content_type, body)
    json_keys: Tuple[str, ...] = ()
    is_openapi = False
    if is_json:
        document, json_keys = parse_json_keys(body)
        if isinstance(document, dict):
            is_openapi = "openapi" in document or "swagger" in document

    is_swagger_ui = "Swagger UI" in body or bool(SWAGGER_UI_ID.search(body))

    is_onvif = is_soap_fault = is_ignorable = False
    if is_soap(content_type, body):
        is_onvif = "onvif" in body.lower()
        is_soap_fault = bool(SOAP_FAULT.search(body))
        is_ignorable = is_soap_fault and IGNORABLE_SOAP_FAULT in body

    return EndpointResult(
        url=url,
        status_code=status_code,
        content_type=content_type,
        server=server,
        title=extract_title(body),
        is_json=is_json,
        json_keys=json_keys,
        is_swagger_ui=is_swagger_ui,
        is_openapi=is_openapi,
        is_onvif=is_onvif,
        is_soap_fault=is_soap_fault,
        is_ignorable_soap_fault=is_ignorable,
        snippet=body[:snippet_length],
        raw_body=body or None,
    )


def content_extension(result: EndpointResult) -> str:
    """
    Pick a file extension for persisting an endpoint body.

    Returns:
        One of ".json", ".xml", ".html", ".txt"
    """
    content_type = (result.content_type or "").lower()
    head = (result.raw_body or "").lstrip()[:100].lower()

    if result.is_json:
        return ".json"
    if "xml" in content_type or result.is_onvif or result.is_soap_fault or head.startswith("<?xml"):
        return ".xml"
    if "html" in content_type or head.startswith("<!doctype html") or head.startswith("<html"):
        return ".html"
    return ".txt"
