"""
Profile Schemas for the Canonical Profile Model.

This module defines the Pydantic models for the canonical professional profile that
every downstream component consumes. Raw imports (structured records or freeform
text) are converted into these models by the ProfileNormalizer; the validator and
optimizer only ever see this shape.

Key Models:
    - Profile: The canonical profile (personal, contact, ordered sub-entity lists, skills)
    - WorkExperience, Education, Certification, Language, Project, VolunteerExperience

Note:
    Fields are snake_case in Python and camelCase on the wire (``startDate``,
    ``profileImage``). Both spellings are accepted on input.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Proficiency = Literal["elementary", "limited", "professional", "full", "native"]


class ProfileModel(BaseModel):
    """Shared configuration for all canonical profile models."""

    model_config = ConfigDict(
        # camelCase on the wire, snake_case in Python
        alias_generator=to_camel,
        # Allows access by both field name and alias
        populate_by_name=True,
    )


class PersonalInfo(ProfileModel):
    name: str = ""
    headline: str = ""
    location: str = ""
    summary: str = ""
    profile_image: Optional[str] = None


class ContactInfo(ProfileModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    linkedin: str = ""  # LinkedIn profile URL, possibly empty


class WorkExperience(ProfileModel):
    """
    A single position.

    ``current`` positions may leave ``end_date`` empty. Dates are YYYY-MM-DD when
    they could be parsed, otherwise the original string.
    """

    id: str
    company: str = ""
    title: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    achievements: List[str] = []
    skills: List[str] = []


class Education(ProfileModel):
    id: str
    institution: str = ""
    degree: str = ""
    field: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: Optional[str] = None
    activities: List[str] = []
    description: str = ""


class Certification(ProfileModel):
    id: str
    name: str = ""
    issuer: str = ""
    issue_date: str = ""
    expiry_date: str = ""
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None


class Language(ProfileModel):
    id: str
    name: str = ""
    proficiency: Proficiency = "professional"


class Project(ProfileModel):
    id: str
    name: str = ""
    description: str = ""
    url: Optional[str] = None
    start_date: str = ""
    end_date: str = ""
    skills: List[str] = []
    team_size: Optional[int] = None


class VolunteerExperience(ProfileModel):
    id: str
    organization: str = ""
    role: str = ""
    cause: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


class Profile(ProfileModel):
    """
    The canonical professional profile.

    This is the central data structure of the import pipeline. It is built once per
    import call by the ProfileNormalizer and treated as a value afterwards: the
    validator reports on it and the optimizer returns a trimmed copy.

    Sub-entity ids are synthetic (``exp_0``, ``edu_1``, ...) and only unique within
    their own list for the lifetime of one import.
    """

    personal: PersonalInfo = Field(default_factory=PersonalInfo)
    contact: ContactInfo = Field(default_factory=ContactInfo)
    experience: List[WorkExperience] = []
    education: List[Education] = []
    skills: List[str] = []  # Order matters: the optimizer keeps the first entries
    certifications: List[Certification] = []
    languages: List[Language] = []
    projects: List[Project] = []
    volunteer: List[VolunteerExperience] = []

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "personal": {
                    "name": "Jane Doe",
                    "headline": "Senior Software Engineer",
                    "location": "Toronto, ON",
                    "summary": "Backend engineer focused on data platforms.",
                },
                "contact": {
                    "email": "jane@example.com",
                    "linkedin": "https://linkedin.com/in/janedoe",
                },
                "experience": [
                    {
                        "id": "exp_0",
                        "company": "Acme",
                        "title": "Senior Software Engineer",
                        "startDate": "2021-03-01",
                        "current": True,
                    }
                ],
                "skills": ["Python", "PostgreSQL"],
            }
        },
    )
