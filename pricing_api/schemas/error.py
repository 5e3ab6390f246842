# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details for the pricing API.

Each HTTP status the API emits maps to a problem type under
``/problems/``, so a broker portal client can branch on ``type`` rather
than parse ``detail``.
"""

from pydantic import BaseModel, Field

PROBLEM_TYPE_PREFIX = "/problems/"
MATRIX_NOT_FOUND_TYPE = f"{PROBLEM_TYPE_PREFIX}pricing-matrix-not-found"

# status -> (title, problem type slug)
PROBLEM_TYPES: dict[int, tuple[str, str]] = {
    400: ("Bad Request", "invalid-request"),
    404: ("Not Found", "not-found"),
    405: ("Method Not Allowed", "method-not-allowed"),
    422: ("Unprocessable Entity", "request-validation-failed"),
    500: ("Internal Server Error", "pricing-service-error"),
}


class FieldError(BaseModel):
    """One rejected request field."""

    field: str = Field(description="Dotted path to the field, e.g. ``input.fico``.")
    message: str


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details, with field errors for rejected loan scenarios.

    See https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        description="URI reference identifying the problem type.",
    )
    title: str = Field(description="Short human-readable summary of the problem.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(
        default="",
        description="Human-readable explanation specific to this occurrence.",
    )
    instance: str = Field(default="", description="Request path that produced the problem.")
    request_id: str = Field(
        default="",
        description="Correlation ID for tracing this request in logs.",
    )
    errors: list[FieldError] | None = None

    @classmethod
    def for_status(
        cls,
        status: int,
        detail: str,
        *,
        instance: str = "",
        request_id: str = "",
        errors: list[FieldError] | None = None,
    ) -> "ErrorResponse":
        """Build a problem body; unmapped statuses fall back to ``about:blank``."""
        title, slug = PROBLEM_TYPES.get(status, ("Error", ""))
        return cls(
            type=f"{PROBLEM_TYPE_PREFIX}{slug}" if slug else "about:blank",
            title=title,
            status=status,
            detail=detail,
            instance=instance,
            request_id=request_id,
            errors=errors,
        )
