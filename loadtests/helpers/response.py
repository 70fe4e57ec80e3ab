"""Turn marketplace API error responses into one-line messages.

Two body shapes come back:

- request validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- business errors (400/404/409/500): {"code": "OutOfStock", "error": {"items": ["..."]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def error_code(response: Response) -> str | None:
    try:
        return response.json().get("code")
    except ValueError:
        return None


def extract_error_detail(response: Response) -> str:
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            detail = " | ".join(f"{field}: {'; '.join(map(str, msgs))}" for field, msgs in error.items())
        else:
            detail = str(error)
        return f"[{body['code']}] {detail}" if body.get("code") else detail

    return str(body)[:300]
