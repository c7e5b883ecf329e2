"""Lawyer onboarding application schemas (collection ``lawyers_details``)."""

from typing import List, Optional

from pydantic import Field, computed_field, field_validator

from .base import RecordModel, StoredRecord


class BarCouncilEnrollment(RecordModel):
    state_bar_council: str = ""
    enrollment_number: str = ""
    year_of_enrollment: str = ""
    enrollment_certificate: Optional[str] = None


class EducationalQualification(RecordModel):
    degree: str = ""
    university: str = ""
    graduation_year: str = ""
    degree_certificate: Optional[str] = None


class AddressDetails(RecordModel):
    chamber_address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""


class LawyerApplication(StoredRecord):
    """Onboarding application submitted by a lawyer.

    Only ``is_approved`` is ever written by the admin; everything else is
    read-only here.
    """

    full_name: str = ""
    email_address: str = ""
    mobile_number: str = ""
    profile_image: Optional[str] = None
    bar_council_enrollment: BarCouncilEnrollment = Field(
        default_factory=BarCouncilEnrollment
    )
    educational_qualifications: List[EducationalQualification] = Field(
        default_factory=list
    )
    practice_areas: List[str] = Field(default_factory=list)
    years_of_experience: int = Field(default=0, ge=0)
    address_details: AddressDetails = Field(default_factory=AddressDetails)
    languages_proficiency: List[str] = Field(default_factory=list)
    terms_and_conditions_agreement: bool = False
    verification_consent: bool = False
    is_payment: bool = False
    is_approved: bool = False

    @field_validator("practice_areas", mode="before")
    @classmethod
    def dedupe_practice_areas(cls, v):
        """Practice areas behave as a set; keep first occurrence order."""
        if v is None:
            return []
        seen = set()
        areas = []
        for area in v:
            if area not in seen:
                seen.add(area)
                areas.append(area)
        return areas

    @field_validator("profile_image", mode="before")
    @classmethod
    def blank_image_is_none(cls, v):
        return v or None

    @computed_field(alias="practiceAreasLabel")
    @property
    def practice_areas_label(self) -> str:
        """Human readable practice areas, e.g. ``criminal law, family law``."""
        return ", ".join(area.replace("_", " ") for area in self.practice_areas)

    @computed_field(alias="paymentStatus")
    @property
    def payment_status(self) -> str:
        return "Paid" if self.is_payment else "Pending"


class LawyerApprovalResponse(RecordModel):
    success: bool = True
    message: str
    lawyer: LawyerApplication
