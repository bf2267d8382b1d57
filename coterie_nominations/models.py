"""
Nomination Data Models

Request model for the nomination form and the outbound email message
built from it. Neither is persisted.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Nominee fields every submission must carry, keyed by JSON field name
NOMINEE_FIELDS = {
    "name": "name",
    "email": "email",
    "title": "title",
    "company": "company",
    "linkedin": "linkedin",
    "community": "community",
    "qualification": "qualification",
}

# Extra fields required for peer nominations
NOMINATOR_FIELDS = {
    "nominatorName": "nominator_name",
    "nominatorEmail": "nominator_email",
}


class NominationSubmission(BaseModel):
    """
    One nomination form submission

    Every field is optional at parse time so that missing values are
    reported by validate_submission() instead of by the framework.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    nomination_type: Optional[str] = Field(None, alias="nominationType")
    name: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    linkedin: Optional[str] = None
    community: Optional[str] = None
    qualification: Optional[str] = None
    nominator_name: Optional[str] = Field(None, alias="nominatorName")
    nominator_email: Optional[str] = Field(None, alias="nominatorEmail")

    def template_context(self) -> dict:
        """Submission fields for template rendering, with missing values as empty strings"""
        return {
            key: ("" if value is None else value)
            for key, value in self.model_dump(by_alias=False).items()
        }


@dataclass(frozen=True)
class EmailMessage:
    """A single outbound email"""
    from_address: str
    to: str
    subject: str
    html_body: str
    reply_to: Optional[str] = None
