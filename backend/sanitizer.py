"""
Validation and clean-up of free-text todo input before it is sent to the
model.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional

MIN_LENGTH = 2
MAX_LENGTH = 500

_VALID_CHARACTER = re.compile(r"[가-힣a-zA-Z0-9]")
_INLINE_WHITESPACE = re.compile(r"[^\S\n]+")
_NEWLINES = re.compile(r"\n+")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


def validate(text: Any) -> ValidationResult:
    """Check the input against the rules in order; the first failure wins."""
    if not text or not isinstance(text, str):
        return ValidationResult(False, "유효한 할 일 내용을 입력해주세요.")

    trimmed = text.strip()

    if len(trimmed) < MIN_LENGTH:
        return ValidationResult(
            False, f"할 일 내용이 너무 짧습니다. 최소 {MIN_LENGTH}자 이상 입력해주세요."
        )

    # Raw length, so padding whitespace still counts against the limit
    if len(text) > MAX_LENGTH:
        return ValidationResult(
            False, f"할 일 내용이 너무 깁니다. 최대 {MAX_LENGTH}자까지 입력 가능합니다."
        )

    if not _VALID_CHARACTER.search(trimmed):
        return ValidationResult(False, "할 일 내용에 유효한 문자가 포함되어야 합니다.")

    return ValidationResult(True)


def normalize(text: str) -> str:
    """Trim and collapse whitespace; newlines survive as single newlines."""
    processed = text.strip()
    processed = _INLINE_WHITESPACE.sub(" ", processed)
    processed = _NEWLINES.sub("\n", processed)
    return processed
