# dex_api/schemas/envelope.py

from typing import Any, Dict, List, Optional


def ok(data: Any, **extra: Any) -> Dict[str, Any]:
    """Success envelope shared by every /api route."""
    return {"success": True, "data": data, **extra}


def fail(error: str, data: Any = None, validation_errors: Optional[List[str]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "data": data, "error": error}
    if validation_errors:
        body["validationErrors"] = validation_errors
    return body
