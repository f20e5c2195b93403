"""
User-facing error payloads for requests the API refuses to process.

An unsuitable column or a poor axis choice is not an error: the rule modules
report those as reasons in ordinary responses. Every payload built here has
``code``, ``message``, ``detail`` and ``suggestion`` keys; the middleware and
handlers add ``correlation_id``.
"""
from typing import Dict, Optional


class ErrorCodes:
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_CHART_TYPE = "UNKNOWN_CHART_TYPE"
    TOO_MANY_COLUMNS = "TOO_MANY_COLUMNS"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.INVALID_REQUEST: {
        "message": "We couldn't understand that request",
        "detail": "Some of the values you sent don't match what this endpoint expects.",
        "suggestion": "Check the request body against the API schema and try again."
    },
    ErrorCodes.UNKNOWN_CHART_TYPE: {
        "message": "We don't know that chart type",
        "detail": "The chart type you asked for isn't one we can recommend or validate.",
        "suggestion": "Use one of: barY, barX, line, areaY, dot, hexbin, heatmap, raster. GET /api/chart-types lists them all."
    },
    ErrorCodes.TOO_MANY_COLUMNS: {
        "message": "That's a lot of columns",
        "detail": "The request carries more column analyses than we accept in one call.",
        "suggestion": "Send only the columns that are part of the insight you are charting."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Too many requests, please slow down",
        "detail": "Each client gets a fixed number of chart requests per minute so the service stays responsive.",
        "suggestion": "Wait about a minute before sending more requests."
    },
    ErrorCodes.TIMEOUT: {
        "message": "That request ran out of time",
        "detail": "Working out the chart suggestions took longer than the server allows.",
        "suggestion": "Try again with fewer columns or a smaller suggestion limit."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Something went wrong on our side",
        "detail": "The server hit an unexpected problem while handling your request.",
        "suggestion": "Try again shortly. If it keeps happening, include the correlation ID when you report it."
    }
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Build the payload for ``error_code``.

    Unrecognised codes keep their code but borrow the UNKNOWN_ERROR wording.
    ``additional_detail`` is appended to the standard detail sentence.
    """
    response = {"code": error_code}
    response.update(ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR]))
    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"
    return response
