# This project was developed with assistance from AI tools.
"""Problem Details (RFC 7807) bodies for lead pipeline errors."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details, https://datatracker.ietf.org/doc/html/rfc7807"""

    type: str = Field(default="about:blank", description="URI reference identifying the problem type.")
    title: str = Field(description="Short summary of the problem, e.g. 'Conflict'.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(default="", description="What went wrong with this lead or condition.")
    request_id: str = Field(default="", description="x-request-id of the failing call, or a generated one.")
    instance: str = Field(default="", description="URI reference identifying this occurrence.")


class RequirementErrorResponse(ErrorResponse):
    """409 body for a change refused until supporting data is on file.

    ``missing_fields`` and ``action_label`` let a client offer the fix
    directly (upload the document, fill in the date).
    """

    missing_fields: list[str] = Field(
        description="Lead or condition fields that must be filled in before the change is allowed.",
    )
    action_label: str | None = Field(
        default=None,
        description="Label for the action that resolves the problem, e.g. 'Upload HOI Policy'.",
    )
