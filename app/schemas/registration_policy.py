"""
Registration policy embedded in an event.

An event declares its own form at runtime, so form fields are modelled as a
tagged union discriminated on `type`. Each variant carries the validation
parameters that make sense for it; input types without a variant of their own
become an OtherField and get the generic required/length/pattern checks.
"""
import re
from datetime import datetime
from typing import Annotated, Any, ClassVar, List, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, validator


class FieldValidation(BaseModel):
    minLength: Optional[int] = Field(None, ge=0)
    maxLength: Optional[int] = Field(None, ge=1)
    pattern: Optional[str] = None

    @validator('pattern')
    def validate_pattern(cls, v):
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f'Invalid validation pattern: {e}')
        return v


class BaseField(BaseModel):
    multi_value: ClassVar[bool] = False

    name: str = Field(..., min_length=1, max_length=200)
    label: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    order: int = 0
    validation: FieldValidation = Field(default_factory=FieldValidation)


class TextField(BaseField):
    type: Literal["text", "textarea"] = "text"


class EmailField(BaseField):
    type: Literal["email"] = "email"


class TelField(BaseField):
    type: Literal["tel"] = "tel"


class NumberField(BaseField):
    type: Literal["number"] = "number"


class DateField(BaseField):
    type: Literal["date"] = "date"


class CheckboxField(BaseField):
    multi_value: ClassVar[bool] = True

    type: Literal["checkbox"] = "checkbox"
    options: List[str] = Field(default_factory=list)


class ChoiceField(BaseField):
    type: Literal["radio", "select"] = "radio"
    options: List[str] = Field(default_factory=list)


class OtherField(BaseField):
    """Any input type without dedicated rules (url, time, hidden, ...)."""
    type: str


FIELD_KINDS = {
    "text": "text",
    "textarea": "text",
    "email": "email",
    "tel": "tel",
    "number": "number",
    "date": "date",
    "checkbox": "checkbox",
    "radio": "choice",
    "select": "choice",
}


def field_kind(value: Any) -> str:
    field_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if not isinstance(field_type, str):
        return "other"
    return FIELD_KINDS.get(field_type, "other")


RegistrationField = Annotated[
    Union[
        Annotated[TextField, Tag("text")],
        Annotated[EmailField, Tag("email")],
        Annotated[TelField, Tag("tel")],
        Annotated[NumberField, Tag("number")],
        Annotated[DateField, Tag("date")],
        Annotated[CheckboxField, Tag("checkbox")],
        Annotated[ChoiceField, Tag("choice")],
        Annotated[OtherField, Tag("other")],
    ],
    Discriminator(field_kind)
]


class WaiverAcknowledgment(BaseModel):
    text: str
    required: bool = True


class WaiverSignaturePolicy(BaseModel):
    required: bool = False


class WaiverPolicy(BaseModel):
    enabled: bool = False
    title: Optional[str] = None
    text: Optional[str] = None
    acknowledgments: List[WaiverAcknowledgment] = Field(default_factory=list)
    signature: WaiverSignaturePolicy = Field(default_factory=WaiverSignaturePolicy)


class RegistrationPolicy(BaseModel):
    isRequired: bool = False
    isOpen: bool = False
    registrationDeadline: Optional[datetime] = None
    maxAttendees: Optional[int] = Field(None, ge=1, description="Absent means unlimited")
    waitlistEnabled: bool = False
    confirmationMessage: Optional[str] = None
    fields: List[RegistrationField] = Field(default_factory=list)
    waiver: Optional[WaiverPolicy] = None

    @validator('fields')
    def validate_unique_names(cls, v):
        names = [f.name for f in v]
        if len(names) != len(set(names)):
            raise ValueError('Field names must be unique within an event')
        return v

    def sorted_fields(self) -> List[BaseField]:
        return sorted(self.fields, key=lambda f: f.order)

    @property
    def waiver_enabled(self) -> bool:
        return bool(self.waiver and self.waiver.enabled)
