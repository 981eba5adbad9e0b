"""Request validation gate - pydantic models as declarative field rules"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Sequence, Type, TypeVar
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

# Leading loc segments FastAPI adds to say where a field came from
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


@dataclass
class ValidationOutcome(Generic[M]):
    """Either the validated model or a joined, human-readable error message"""

    ok: bool
    normalized: Optional[M] = None
    errors: Optional[str] = None


def format_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Join every failing field into one message, e.g. "name: String should have at least 2 characters" """
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc)
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return ", ".join(messages)


def validate(schema: Type[M], payload: Any) -> ValidationOutcome[M]:
    """
    Check a payload against a schema without side effects.

    All failing fields are reported together rather than stopping at the first.
    """
    try:
        model = schema.model_validate(payload)
    except ValidationError as e:
        return ValidationOutcome(ok=False, errors=format_errors(e.errors()))
    return ValidationOutcome(ok=True, normalized=model)
