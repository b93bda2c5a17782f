# dex_api/validation.py

import json
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

from fastapi import Request
from jsonschema import Draft7Validator, FormatChecker
from pydantic import BaseModel, ValidationError

from dex_api.errors import BadRequestError
from dex_api.services.formatters import is_valid_sui_address, normalize_address

M = TypeVar("M", bound=BaseModel)

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas" / "json"


def _load_validators() -> Dict[str, Draft7Validator]:
    """Load every request schema once at import time, sharing the common definitions."""
    with (SCHEMA_DIR / "_defs.json").open("r", encoding="utf-8") as f:
        definitions = json.load(f)
    validators = {}
    for path in sorted(SCHEMA_DIR.glob("*.json")):
        if path.name.startswith("_"):
            continue
        with path.open("r", encoding="utf-8") as f:
            schema = json.load(f)
        schema["definitions"] = definitions
        Draft7Validator.check_schema(schema)
        validators[path.stem] = Draft7Validator(schema, format_checker=FormatChecker())
    return validators


_validators = _load_validators()


def _error_message(error) -> str:
    location = "/".join(str(p) for p in error.absolute_path)
    return f"{location}: {error.message}" if location else error.message


def schema_errors(schema_name: str, payload: Any) -> List[str]:
    validator = _validators[schema_name]
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(map(str, e.absolute_path)))
    return [_error_message(e) for e in errors]


async def parse_body(request: Request, schema_name: str, model: Type[M]) -> M:
    """
    Parse a JSON body, validate it against the named JSON schema, then build the
    pydantic model. Any failure raises BadRequestError (400) before upstream I/O.
    """
    try:
        payload = await request.json()
    except (ValueError, UnicodeDecodeError):
        raise BadRequestError("Invalid JSON format")

    errors = schema_errors(schema_name, payload)
    if errors:
        raise BadRequestError("Invalid request body", validation_errors=errors)

    try:
        return model(**payload)
    except ValidationError as ex:
        raise BadRequestError(
            "Invalid request body",
            validation_errors=[f"{'/'.join(map(str, e['loc']))}: {e['msg']}" for e in ex.errors()],
        )


def require_sui_address(address: str, what: str = "Wallet address") -> str:
    if not is_valid_sui_address(address):
        raise BadRequestError(f"{what} is invalid")
    return normalize_address(address)
