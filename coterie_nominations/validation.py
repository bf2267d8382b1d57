"""
Submission Validation Module

Required-field checks run on a nomination before any email is attempted.
"""

from typing import List

from .models import NOMINATOR_FIELDS, NOMINEE_FIELDS, NominationSubmission
from .templates import NominationType


class SubmissionValidationError(Exception):
    """Raised when a submission is missing required fields"""

    def __init__(self, missing_fields: List[str], message: str = None):
        self.missing_fields = missing_fields
        super().__init__(message or f"Missing required fields: {', '.join(missing_fields)}")


def _is_blank(value) -> bool:
    return value is None or not str(value).strip()


def get_missing_fields(submission: NominationSubmission) -> List[str]:
    """
    List the required fields a submission is missing

    Nominee fields are always required; nominator fields only for peer
    nominations. Whitespace-only values count as missing.

    Args:
        submission: Parsed nomination form

    Returns:
        JSON field names of the missing values, in form order
    """
    missing = [
        json_name for json_name, attr in NOMINEE_FIELDS.items()
        if _is_blank(getattr(submission, attr))
    ]

    if submission.nomination_type == NominationType.PEER.value:
        missing.extend(
            json_name for json_name, attr in NOMINATOR_FIELDS.items()
            if _is_blank(getattr(submission, attr))
        )

    return missing


def validate_nomination_type(submission: NominationSubmission) -> None:
    """
    Validate that the nomination type is one of the accepted values

    Raises:
        SubmissionValidationError: If nominationType is missing or unknown
    """
    accepted = [t.value for t in NominationType]
    if submission.nomination_type not in accepted:
        raise SubmissionValidationError(
            ["nominationType"],
            f"Invalid nominationType: {submission.nomination_type!r}. Accepted: {', '.join(accepted)}"
        )


def validate_submission(submission: NominationSubmission) -> None:
    """
    Validate a nomination submission

    Args:
        submission: Parsed nomination form

    Raises:
        SubmissionValidationError: If the type is invalid or required fields are missing
    """
    validate_nomination_type(submission)

    missing = get_missing_fields(submission)
    if missing:
        raise SubmissionValidationError(missing)
