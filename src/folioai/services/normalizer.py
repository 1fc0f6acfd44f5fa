"""
Normalizes raw profile imports into the canonical Profile model.

Upstream profile sources arrive in at least two incompatible shapes: structured
records whose key spellings vary by exporter, and freeform pasted text. The
normalizer absorbs that variance so every downstream component sees one shape.

CLASSES:
    ProfileNormalizer

FUNCTIONS (in order of workflow):
    1. parse                    (public use)
    2. _parse_structured        (internal use)
    3. _parse_text              (internal use)
    4. extract_achievements     (public use, also used by _parse_experience)
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from folioai.config.profile_schemas import (
    Certification,
    ContactInfo,
    Education,
    Language,
    PersonalInfo,
    Profile,
    Project,
    VolunteerExperience,
    WorkExperience,
)
from folioai.config.validation_constants import (
    ACHIEVEMENT_VERBS,
    DEFAULT_PROFICIENCY,
    HEADER_SECTION,
    SECTION_HEADER_MAX_LENGTH,
    SECTION_KEYWORDS,
    VALID_IMPORT_FORMATS,
    VALID_PROFICIENCIES,
)
from folioai.utils.exceptions import ParseError
from folioai.utils.logger import get_logger
from folioai.utils.normalization import (
    as_optional_text,
    as_text,
    as_text_list,
    first_present,
    is_blank,
    normalize_date,
)

logger = get_logger(__name__)

# Contact patterns (text mode)
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(
    r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})"
)
WEBSITE_PATTERN = re.compile(
    r"https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"[-a-zA-Z0-9()@:%_+.~#?&/=]*"
)
LINKEDIN_PATTERN = re.compile(r"https?://(?:www\.)?linkedin\.com/in/[a-zA-Z0-9-]+")
LOCATION_PATTERN = re.compile(
    r"\b(?:located|based|from)\s+(?:in\s+)?([^,\n]+(?:,\s*[^,\n]+)*)", re.IGNORECASE
)

# Achievement patterns (structured mode experience descriptions)
BULLET_PATTERN = re.compile(r"^[ \t]*[•·*-][ \t]*(.+)$", re.MULTILINE)
ACHIEVEMENT_PATTERN = re.compile(
    r"(?:^|(?<=[.!?]))[ \t]*(?:" + "|".join(ACHIEVEMENT_VERBS) + r")[ \t]+([^.\n]+)",
    re.IGNORECASE | re.MULTILINE,
)

# Separators for the text-mode skills section
SKILL_SEPARATORS = re.compile(r"[,\n•·]")
# Blank-line boundary between experience/education blocks
BLOCK_SEPARATOR = re.compile(r"\n\s*\n")


def extract_achievements(description: str) -> List[str]:
    """Extract achievements from an experience description.

    Collects bullet-prefixed lines first, then the remainder of every line or
    sentence that opens with an achievement verb ("Increased revenue by 20%"
    yields "revenue by 20%").

    Args:
        description (str): Free-text experience description.

    Returns:
        List[str]: The achievements, in order of discovery.
    """

    if not description:
        return []

    achievements = []
    for pattern in (BULLET_PATTERN, ACHIEVEMENT_PATTERN):
        for match in pattern.finditer(description):
            achievement = match.group(1).strip()
            if achievement:
                achievements.append(achievement)
    return achievements


class ProfileNormalizer:
    """Converts raw profile input into the canonical Profile.

    Responsibilities:
    1. Decode structured input and resolve alternative key spellings
    2. Segment freeform text into sections and extract what the heuristics can find
    3. Assign positional synthetic ids to every sub-entity
    4. Normalize dates to YYYY-MM-DD where they can be parsed

    Structured mode fails loudly on malformed syntax; text mode never fails.
    """

    # ------------------------------
    # Public interface
    # ------------------------------
    def parse(self, data: Union[str, bytes, Mapping[str, Any]], mode: str = "text") -> Profile:
        """Parse a raw profile.

        Args:
            data: Serialized JSON (str/bytes) or an already decoded mapping for
                mode "json"; profile text for mode "text".
            mode (str): "json" for structured records, "text" for freeform text.

        Returns:
            Profile: The canonical profile.

        Raises:
            ParseError: If mode is unknown, or structured input is not a valid
                JSON object.
        """

        if mode not in VALID_IMPORT_FORMATS:
            raise ParseError(
                f"Unsupported import format: {mode}. Valid formats: {sorted(VALID_IMPORT_FORMATS)}"
            )

        if mode == "json":
            profile = self._parse_structured(self._decode_structured(data))
        else:
            profile = self._parse_text(self._coerce_text(data))

        logger.info(
            "Profile normalized",
            extra={
                "extra_fields": {
                    "import_format": mode,
                    "experience_count": len(profile.experience),
                    "education_count": len(profile.education),
                    "skills_count": len(profile.skills),
                }
            },
        )
        return profile

    # ------------------------------
    # Structured mode
    # ------------------------------
    def _decode_structured(self, data: Any) -> Dict[str, Any]:
        """Decode structured input into a plain dict."""

        if isinstance(data, Mapping):
            return dict(data)

        if isinstance(data, (bytes, bytearray)):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"Failed to parse profile: {e}") from e

        if not isinstance(data, str):
            raise ParseError(
                f"Failed to parse profile: unsupported input type {type(data).__name__}"
            )

        try:
            decoded = json.loads(data)
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse profile: {e.msg} (line {e.lineno}, column {e.colno})") from e

        if not isinstance(decoded, dict):
            raise ParseError(
                f"Failed to parse profile: expected a JSON object, got {type(decoded).__name__}"
            )
        return decoded

    def _parse_structured(self, data: Dict[str, Any]) -> Profile:
        """Map a structured record onto the canonical profile."""

        personal = PersonalInfo(
            name=as_text(first_present(data, ("name", "fullName"), "")),
            headline=as_text(first_present(data, ("headline", "title"), "")),
            location=as_text(first_present(data, ("location", "address"), "")),
            summary=as_text(first_present(data, ("summary", "about"), "")),
            profile_image=as_optional_text(
                first_present(data, ("profilePicture", "image", "avatar"))
            ),
        )
        contact = ContactInfo(
            email=as_optional_text(data.get("email")),
            phone=as_optional_text(data.get("phone")),
            website=as_optional_text(first_present(data, ("website", "personalWebsite"))),
            linkedin=as_text(first_present(data, ("linkedinUrl", "profileUrl"), "")),
        )

        return Profile(
            personal=personal,
            contact=contact,
            experience=self._parse_experience(
                self._list_field(data, ("experience", "workExperience"))
            ),
            education=self._parse_education(self._list_field(data, ("education",))),
            skills=self._parse_skills(self._list_field(data, ("skills",))),
            certifications=self._parse_certifications(
                self._list_field(data, ("certifications",))
            ),
            languages=self._parse_languages(self._list_field(data, ("languages",))),
            projects=self._parse_projects(self._list_field(data, ("projects",))),
            volunteer=self._parse_volunteer(
                self._list_field(data, ("volunteer", "volunteering"))
            ),
        )

    def _list_field(self, data: Dict[str, Any], keys: tuple) -> list:
        """Resolve a list-valued field; a non-list value is treated as empty."""

        value = first_present(data, keys, [])
        if not isinstance(value, (list, tuple)):
            logger.warning(
                "Ignoring non-list profile field",
                extra={
                    "extra_fields": {
                        "field": keys[0],
                        "value_type": type(value).__name__,
                    }
                },
            )
            return []
        return list(value)

    def _parse_experience(self, records: list) -> List[WorkExperience]:
        experience = []
        for index, exp in enumerate(records):
            if not isinstance(exp, Mapping):
                continue
            description = as_text(first_present(exp, ("description", "summary"), ""))
            experience.append(
                WorkExperience(
                    id=f"exp_{index}",
                    company=as_text(first_present(exp, ("company", "companyName"), "")),
                    title=as_text(first_present(exp, ("title", "position", "role"), "")),
                    location=as_text(exp.get("location")),
                    start_date=normalize_date(first_present(exp, ("startDate", "from"))),
                    end_date=normalize_date(first_present(exp, ("endDate", "to"))),
                    current=bool(exp.get("current") or exp.get("isCurrent")),
                    description=description,
                    achievements=extract_achievements(description),
                    skills=as_text_list(exp.get("skills")),
                )
            )
        return experience

    def _parse_education(self, records: list) -> List[Education]:
        education = []
        for index, edu in enumerate(records):
            if not isinstance(edu, Mapping):
                continue
            education.append(
                Education(
                    id=f"edu_{index}",
                    institution=as_text(
                        first_present(edu, ("institution", "school", "university"), "")
                    ),
                    degree=as_text(first_present(edu, ("degree", "degreeType"), "")),
                    field=as_text(
                        first_present(edu, ("field", "fieldOfStudy", "major"), "")
                    ),
                    start_date=normalize_date(first_present(edu, ("startDate", "from"))),
                    end_date=normalize_date(first_present(edu, ("endDate", "to"))),
                    gpa=as_optional_text(first_present(edu, ("gpa", "grade"))),
                    activities=as_text_list(edu.get("activities")),
                    description=as_text(edu.get("description")),
                )
            )
        return education

    def _parse_skills(self, records: list) -> List[str]:
        skills = []
        for skill in records:
            if isinstance(skill, Mapping):
                skill = first_present(skill, ("name", "skill"), "")
            if not is_blank(skill):
                skills.append(as_text(skill))
        return skills

    def _parse_certifications(self, records: list) -> List[Certification]:
        certifications = []
        for index, cert in enumerate(records):
            if not isinstance(cert, Mapping):
                continue
            certifications.append(
                Certification(
                    id=f"cert_{index}",
                    name=as_text(first_present(cert, ("name", "title"), "")),
                    issuer=as_text(
                        first_present(cert, ("issuer", "organization", "company"), "")
                    ),
                    issue_date=normalize_date(first_present(cert, ("issueDate", "date"))),
                    expiry_date=normalize_date(cert.get("expiryDate")),
                    credential_id=as_optional_text(
                        first_present(cert, ("credentialId", "id"))
                    ),
                    credential_url=as_optional_text(
                        first_present(cert, ("credentialUrl", "url"))
                    ),
                )
            )
        return certifications

    def _parse_languages(self, records: list) -> List[Language]:
        languages = []
        for index, lang in enumerate(records):
            if isinstance(lang, Mapping):
                name = as_text(first_present(lang, ("name", "language"), ""))
                proficiency = as_text(lang.get("proficiency")).strip().lower()
            elif isinstance(lang, str):
                name, proficiency = lang, ""
            else:
                continue
            if proficiency not in VALID_PROFICIENCIES:
                proficiency = DEFAULT_PROFICIENCY
            languages.append(
                Language(id=f"lang_{index}", name=name, proficiency=proficiency)
            )
        return languages

    def _parse_projects(self, records: list) -> List[Project]:
        projects = []
        for index, proj in enumerate(records):
            if not isinstance(proj, Mapping):
                continue
            team_size = proj.get("teamSize")
            projects.append(
                Project(
                    id=f"proj_{index}",
                    name=as_text(first_present(proj, ("name", "title"), "")),
                    description=as_text(
                        first_present(proj, ("description", "summary"), "")
                    ),
                    url=as_optional_text(first_present(proj, ("url", "link", "website"))),
                    start_date=normalize_date(first_present(proj, ("startDate", "from"))),
                    end_date=normalize_date(first_present(proj, ("endDate", "to"))),
                    skills=as_text_list(first_present(proj, ("skills", "technologies"))),
                    team_size=self._optional_int(team_size),
                )
            )
        return projects

    def _parse_volunteer(self, records: list) -> List[VolunteerExperience]:
        volunteer = []
        for index, vol in enumerate(records):
            if not isinstance(vol, Mapping):
                continue
            volunteer.append(
                VolunteerExperience(
                    id=f"vol_{index}",
                    organization=as_text(
                        first_present(vol, ("organization", "company"), "")
                    ),
                    role=as_text(first_present(vol, ("role", "position", "title"), "")),
                    cause=as_text(first_present(vol, ("cause", "area"), "")),
                    start_date=normalize_date(first_present(vol, ("startDate", "from"))),
                    end_date=normalize_date(first_present(vol, ("endDate", "to"))),
                    description=as_text(
                        first_present(vol, ("description", "summary"), "")
                    ),
                )
            )
        return volunteer

    @staticmethod
    def _optional_int(value: Any) -> Optional[int]:
        if isinstance(value, bool) or is_blank(value):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    # ------------------------------
    # Text mode
    # ------------------------------
    @staticmethod
    def _coerce_text(data: Any) -> str:
        if data is None:
            return ""
        if isinstance(data, (bytes, bytearray)):
            return data.decode("utf-8", errors="replace")
        return data if isinstance(data, str) else str(data)

    def _parse_text(self, text: str) -> Profile:
        """Best-effort extraction from freeform profile text.

        Certifications, languages, projects and volunteer work are segmented but
        not extracted in text mode; they come back empty.
        """

        sections = self._split_into_sections(text)
        return Profile(
            personal=self._extract_personal_info(sections),
            contact=self._extract_contact_info(sections),
            experience=self._extract_experience(sections),
            education=self._extract_education(sections),
            skills=self._extract_skills(sections),
            certifications=[],
            languages=[],
            projects=[],
            volunteer=[],
        )

    def _split_into_sections(self, text: str) -> Dict[str, str]:
        """Split profile text into named sections.

        A short line containing a section keyword starts a new section named after
        that keyword. Everything before the first such line is the header section.
        """

        sections: Dict[str, str] = {}
        current_section = HEADER_SECTION
        buffer: List[str] = []

        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        for line in lines:
            found = None
            if len(line) < SECTION_HEADER_MAX_LENGTH:
                lowered = line.lower().strip()
                found = next((kw for kw in SECTION_KEYWORDS if kw in lowered), None)

            if found:
                content = "\n".join(buffer).strip()
                if content:
                    sections[current_section] = content
                current_section, buffer = found, []
            else:
                buffer.append(line)

        content = "\n".join(buffer).strip()
        if content:
            sections[current_section] = content
        return sections

    def _extract_personal_info(self, sections: Dict[str, str]) -> PersonalInfo:
        header = sections.get(HEADER_SECTION, "")
        lines = [line.strip() for line in header.split("\n") if line.strip()]

        return PersonalInfo(
            name=lines[0] if lines else "",
            headline=lines[1] if len(lines) > 1 else "",
            location=self._extract_location(header),
            summary=sections.get("about") or sections.get("summary") or "",
        )

    def _extract_contact_info(self, sections: Dict[str, str]) -> ContactInfo:
        text = "\n".join(sections.values())

        email = EMAIL_PATTERN.search(text)
        phone = PHONE_PATTERN.search(text)
        website = WEBSITE_PATTERN.search(text)
        linkedin = LINKEDIN_PATTERN.search(text)
        return ContactInfo(
            email=email.group(0) if email else None,
            phone=phone.group(0) if phone else None,
            website=website.group(0) if website else None,
            linkedin=linkedin.group(0) if linkedin else "",
        )

    @staticmethod
    def _extract_location(text: str) -> str:
        match = LOCATION_PATTERN.search(text)
        return match.group(1).strip() if match else ""

    @staticmethod
    def _split_blocks(section_text: str) -> List[List[str]]:
        """Split a section on blank lines into blocks of trimmed lines."""

        blocks = [b for b in BLOCK_SEPARATOR.split(section_text) if b.strip()]
        return [[line.strip() for line in block.split("\n")] for block in blocks]

    def _extract_experience(self, sections: Dict[str, str]) -> List[WorkExperience]:
        experience_text = sections.get("experience", "")
        if not experience_text:
            return []

        experiences = []
        for index, lines in enumerate(self._split_blocks(experience_text)):
            if len(lines) < 2:
                continue
            experiences.append(
                WorkExperience(
                    id=f"exp_{index}",
                    title=lines[0],
                    company=lines[1],
                    description=" ".join(lines[2:]),
                )
            )
        return experiences

    def _extract_education(self, sections: Dict[str, str]) -> List[Education]:
        education_text = sections.get("education", "")
        if not education_text:
            return []

        education = []
        for index, lines in enumerate(self._split_blocks(education_text)):
            if len(lines) < 2:
                continue
            education.append(
                Education(id=f"edu_{index}", institution=lines[0], degree=lines[1])
            )
        return education

    def _extract_skills(self, sections: Dict[str, str]) -> List[str]:
        skills_text = sections.get("skills", "")
        if not skills_text:
            return []

        return [
            skill.strip() for skill in SKILL_SEPARATORS.split(skills_text) if skill.strip()
        ]
