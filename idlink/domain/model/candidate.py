"""Linking candidate value types.

Candidates are computed on demand and never persisted.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from idlink.domain.model.common import DomainModel
from idlink.domain.value import AttributeType, UserId


class MatchedAttribute(DomainModel):
    """One attribute shared between the subject and a candidate."""

    attribute_type: AttributeType
    value: str


class LinkCandidate(DomainModel):
    """Scored suggestion that another record belongs to the same person."""

    candidate_user_id: UserId
    matched_attributes: list[MatchedAttribute] = Field(default_factory=list)
    confidence: int = Field(ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)

    # Shown to the user when asking for confirmation
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    auth_methods: list[str] = Field(default_factory=list)
    last_active_at: datetime
