"""
Server-side validation of registration submissions.

Nothing submitted by the browser is trusted: every declared field is checked
against the event's policy, then the waiver acknowledgments and signature.
"""
import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

from app.schemas.registration_policy import BaseField, WaiverPolicy
from app.schemas.registration import WaiverSubmission

EMAIL_FALLBACK_KEYS = ("Email", "email", "E-mail", "e-mail")

ACKNOWLEDGMENT_ERROR = "Please accept all required acknowledgments."
SIGNATURE_ERROR = "Please provide your signature."
EMAIL_REQUIRED_ERROR = "Email is required."


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        return " ".join(self.errors)


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def _normalize(descriptor: BaseField, value: Any) -> Any:
    # A checkbox group with a single box ticked may arrive as a bare string
    if descriptor.multi_value and isinstance(value, str):
        return [value]
    return value


def resolve_email(fields: Sequence[BaseField], submission: Mapping[str, Any]) -> Optional[str]:
    """
    Find the registrant's email address in a submission.

    The first field declared with type "email" wins; otherwise the common
    spellings in EMAIL_FALLBACK_KEYS are tried in order.

    Returns:
        Optional[str]: Stripped, lowercased address, or None if absent
    """
    candidates = []
    email_field = next((f for f in fields if f.type == "email"), None)
    if email_field is not None:
        candidates.append(submission.get(email_field.name))
    candidates.extend(submission.get(key) for key in EMAIL_FALLBACK_KEYS)

    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip().lower()
    return None


def _check_field(descriptor: BaseField, value: Any) -> Optional[str]:
    name = descriptor.name

    if _is_empty(value):
        if descriptor.required:
            return f"{name} is required."
        return None

    rules = descriptor.validation

    if isinstance(value, (str, list)):
        if rules.minLength is not None and len(value) < rules.minLength:
            return f"{name} must be at least {rules.minLength} characters."
        if rules.maxLength is not None and len(value) > rules.maxLength:
            return f"{name} must be no more than {rules.maxLength} characters."

    if rules.pattern:
        items = value if isinstance(value, list) else [value]
        for item in items:
            if isinstance(item, bool):
                continue
            if re.fullmatch(rules.pattern, str(item)) is None:
                return f"{name} format is invalid."

    return None


def validate_fields(fields: Sequence[BaseField], submission: Mapping[str, Any]) -> List[str]:
    errors = []
    for descriptor in fields:
        value = _normalize(descriptor, submission.get(descriptor.name))
        error = _check_field(descriptor, value)
        if error:
            errors.append(error)
    return errors


def validate_waiver(
    waiver_policy: Optional[WaiverPolicy],
    waiver_submission: Optional[WaiverSubmission]
) -> List[str]:
    if waiver_policy is None or not waiver_policy.enabled:
        return []

    errors = []
    submitted = waiver_submission.acknowledgments if waiver_submission else []

    # Acknowledgments are matched to the policy by position
    for index, acknowledgment in enumerate(waiver_policy.acknowledgments):
        if not acknowledgment.required:
            continue
        if index >= len(submitted) or not submitted[index].accepted:
            errors.append(ACKNOWLEDGMENT_ERROR)
            break

    if waiver_policy.signature.required:
        signature = waiver_submission.signature if waiver_submission else None
        value = (signature.value or "").strip() if signature else ""
        if not value:
            errors.append(SIGNATURE_ERROR)
        elif signature.type == "draw" and not value.startswith("data:image/"):
            errors.append(SIGNATURE_ERROR)

    return errors


def validate(
    fields: Sequence[BaseField],
    submission: Mapping[str, Any],
    waiver_policy: Optional[WaiverPolicy] = None,
    waiver_submission: Optional[WaiverSubmission] = None
) -> ValidationResult:
    errors = validate_fields(fields, submission)
    errors.extend(validate_waiver(waiver_policy, waiver_submission))
    return ValidationResult(errors=errors)
