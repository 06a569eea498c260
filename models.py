from pydantic import BaseModel, Field, field_validator
from typing import Any, List

TEXT_FIELDS = (
    "title",
    "date_text",
    "time_text",
    "start_iso",
    "end_iso",
    "location",
    "address",
    "join_url",
    "organizer_name",
    "organizer_email",
    "scheduler_name",
    "scheduler_email",
    "source_subject",
)
LIST_FIELDS = ("attendees_primary", "companies")


class EmailInput(BaseModel):
    subject: str = ""
    body: str = ""
    html: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("subject", "body", "html", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)


class MeetingRecord(BaseModel):
    """Meeting details extracted from one email.

    Field order is the order the template is shown to the model.
    """

    title: str = ""
    date_text: str = ""
    time_text: str = ""
    start_iso: str = ""
    end_iso: str = ""
    location: str = ""
    address: str = ""
    join_url: str = ""
    organizer_name: str = ""
    organizer_email: str = ""
    scheduler_name: str = ""
    scheduler_email: str = ""
    attendees_primary: List[str] = Field(default_factory=list)
    companies: List[str] = Field(default_factory=list)
    source_subject: str = ""

    model_config = {"extra": "ignore"}

    # Model output is untrusted: wrong types fall back to defaults instead of failing.
    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> List[str]:
        if not isinstance(v, (list, tuple)):
            return []
        return [item for item in v if isinstance(item, str)]

    @classmethod
    def from_untrusted(cls, raw: Any) -> "MeetingRecord":
        """Coerce whatever the model returned into a well-typed record."""
        if not isinstance(raw, dict):
            return cls()
        return cls.model_validate(raw)


def extraction_template() -> dict:
    """The empty schema shown to the model as the target shape."""
    return MeetingRecord().model_dump()
