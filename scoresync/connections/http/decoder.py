import json
from typing import Any

from ...errors import HttpError, ParseError
from ..data_contract import HttpResponse


def decode_response(response: HttpResponse) -> Any:
    """Parse a 2xx body as JSON. Non-2xx bodies are treated as text and never parsed."""
    if not response.is_success:
        raise HttpError(response.status_code, response.body)

    try:
        return json.loads(response.body)
    except json.JSONDecodeError as exc:
        raise ParseError(response.body, exc) from exc
