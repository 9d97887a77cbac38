"""Declarative request validation.

A rule is a callable that takes the raw JSON payload and returns the list of
violations it finds. Rules are combined with ``ruleset``; every rule runs, so
the caller can report all problems at once instead of only the first.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from email_validator import EmailNotValidError, validate_email as _validate_email_address

from coallytasks.errors import ValidationError

PASSWORD_MIN_LENGTH = 5

NAME_REQUIRED_MESSAGE = "El nombre es obligatorio."
EMAIL_INVALID_MESSAGE = "Debes proporcionar un correo electrónico válido."
PASSWORD_TOO_SHORT_MESSAGE = f"La contraseña debe tener al menos {PASSWORD_MIN_LENGTH} caracteres."
PASSWORD_REQUIRED_MESSAGE = "Debes ingresar la contraseña"
TITLE_REQUIRED_MESSAGE = "El título es obligatorio."

@dataclass(frozen=True)
class Violation:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}

Rule = Callable[[Mapping[str, Any]], List[Violation]]

def _value(payload: Mapping[str, Any], field: str) -> Any:
    if not isinstance(payload, Mapping):
        return None
    return payload.get(field)

def not_empty(field: str, message: str) -> Rule:
    """Field must be present and, for strings, contain a non-blank character."""

    def rule(payload: Mapping[str, Any]) -> List[Violation]:
        value = _value(payload, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            return [Violation(field, message)]
        return []

    return rule

def is_email(field: str, message: str) -> Rule:
    """Field must be a syntactically valid email address."""

    def rule(payload: Mapping[str, Any]) -> List[Violation]:
        value = _value(payload, field)
        if not isinstance(value, str):
            return [Violation(field, message)]
        try:
            _validate_email_address(value, check_deliverability=False)
        except EmailNotValidError:
            return [Violation(field, message)]
        return []

    return rule

def min_length(field: str, length: int, message: str) -> Rule:
    """Field must be a string of at least ``length`` characters."""

    def rule(payload: Mapping[str, Any]) -> List[Violation]:
        value = _value(payload, field)
        if not isinstance(value, str) or len(value) < length:
            return [Violation(field, message)]
        return []

    return rule

def ruleset(*rules: Rule) -> Rule:
    """Join rules into one; violations keep declaration order."""

    def rule(payload: Mapping[str, Any]) -> List[Violation]:
        violations: List[Violation] = []
        for r in rules:
            violations.extend(r(payload))
        return violations

    return rule

def validate(payload: Optional[Mapping[str, Any]], rule: Rule) -> List[Violation]:
    """Apply ``rule`` to ``payload``. An empty list means the payload is acceptable."""
    return rule(payload if payload is not None else {})

def ensure_valid(payload: Optional[Mapping[str, Any]], rule: Rule) -> None:
    """Raise ``ValidationError`` carrying every violation, if there are any."""
    violations = validate(payload, rule)
    if violations:
        raise ValidationError(violations)

REGISTER_RULES = ruleset(
    not_empty("name", NAME_REQUIRED_MESSAGE),
    is_email("email", EMAIL_INVALID_MESSAGE),
    min_length("password", PASSWORD_MIN_LENGTH, PASSWORD_TOO_SHORT_MESSAGE),
)

LOGIN_RULES = ruleset(
    is_email("email", EMAIL_INVALID_MESSAGE),
    min_length("password", PASSWORD_MIN_LENGTH, PASSWORD_REQUIRED_MESSAGE),
)

TASK_CREATE_RULES = ruleset(
    not_empty("title", TITLE_REQUIRED_MESSAGE),
)
