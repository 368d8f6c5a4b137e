"""Reply shapes shared by every tool: a dict with ``status`` and ``message``."""

from typing import Any, Dict

from pydantic import ValidationError

from ..errors import AlreadyConfirmed, LifecycleError


def success(message: str, **data: Any) -> Dict[str, Any]:
    return {"status": "success", "message": message, **data}


def info(message: str, **data: Any) -> Dict[str, Any]:
    return {"status": "info", "message": message, **data}


def error(message: str, **data: Any) -> Dict[str, Any]:
    return {"status": "error", "message": message, **data}


def from_outcome(outcome) -> Dict[str, Any]:
    """Phrase a manager's non-success outcome."""
    if isinstance(outcome, AlreadyConfirmed):
        return info(**outcome.to_dict(), record=outcome.record.model_dump(mode="json"))
    if isinstance(outcome, LifecycleError):
        return error(**outcome.to_dict())
    raise TypeError(f"Not an outcome: {outcome!r}")


def invalid_input(e: ValidationError) -> Dict[str, Any]:
    problems = []
    for err in e.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "input"
        problems.append(f"{field}: {err.get('msg')}")
    return error("Invalid input", error="invalid_input", details=problems)
