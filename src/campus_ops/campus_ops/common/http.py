from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import NotFoundError, ScheduleConflictError, ValidationError

logger = logging.getLogger(__name__)


def _conflict_payload(conflicts: list) -> list:
    return [c.to_dict() if hasattr(c, "to_dict") else c for c in conflicts]


def json_api(view):
    """Map domain exceptions raised by a JSON view to status codes.

    ValidationError -> 400, NotFoundError -> 404, ScheduleConflictError -> 409,
    anything else -> 500 (logged with traceback, message kept generic).
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ScheduleConflictError as e:
            return jsonify({"success": False, "message": str(e), "conflicts": _conflict_payload(e.conflicts)}), 409
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return jsonify({"success": False, "message": "Server error"}), 500

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON body is required")
    return data


def optional_int(value, field_name: str):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid") from None
