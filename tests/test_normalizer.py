# ---------- TESTS FOR PROFILE NORMALIZER ----------

import json
import pytest

from folioai.services.normalizer import ProfileNormalizer, extract_achievements
from folioai.utils.exceptions import ParseError


# Mock structured record using alternate key spellings
mock_record = {
    "fullName": "Jane Doe",
    "title": "Senior Software Engineer",
    "address": "Toronto, ON",
    "about": "Backend engineer focused on data platforms.",
    "avatar": "https://example.com/jane.png",
    "email": "jane@example.com",
    "personalWebsite": "https://janedoe.dev",
    "profileUrl": "https://linkedin.com/in/janedoe",
    "workExperience": [
        {
            "companyName": "Acme",
            "position": "Senior Software Engineer",
            "from": "2021-03-15",
            "isCurrent": True,
            "summary": "Increased throughput by 40%. Led the data team",
            "skills": ["Python", "", "Kafka"],
        },
        {
            "company": "Globex",
            "role": "Software Engineer",
            "startDate": "2018-06-01",
            "endDate": "2021-02-28",
        },
    ],
    "education": [
        {
            "school": "University of Toronto",
            "degreeType": "BSc",
            "major": "Computer Science",
            "grade": 3.8,
        }
    ],
    "skills": ["Python", {"name": "SQL"}, {"skill": "Go"}, "", None],
    "certifications": [
        {"title": "AWS Solutions Architect", "organization": "Amazon", "date": "2022-05-01"}
    ],
    "languages": [
        {"language": "English", "proficiency": "Native"},
        {"name": "French", "proficiency": "conversational"},
        "Spanish",
    ],
    "projects": [
        {"title": "Portfolio", "link": "https://github.com/jane/portfolio", "technologies": ["React"], "teamSize": "3"}
    ],
    "volunteering": [
        {"company": "Code Club", "position": "Mentor", "area": "Education"}
    ],
}


@pytest.fixture
def normalizer():
    return ProfileNormalizer()


def test_parse_structured_alternate_keys(normalizer):
    """Test that alternate key spellings populate canonical fields."""
    profile = normalizer.parse(mock_record, mode="json")

    assert profile.personal.name == "Jane Doe"
    assert profile.personal.headline == "Senior Software Engineer"
    assert profile.personal.location == "Toronto, ON"
    assert profile.personal.summary == "Backend engineer focused on data platforms."
    assert profile.personal.profile_image == "https://example.com/jane.png"
    assert profile.contact.email == "jane@example.com"
    assert profile.contact.phone is None
    assert profile.contact.website == "https://janedoe.dev"
    assert profile.contact.linkedin == "https://linkedin.com/in/janedoe"


def test_parse_structured_accepts_serialized_json(normalizer):
    """Test that a JSON string and a decoded mapping give the same profile."""
    from_string = normalizer.parse(json.dumps(mock_record), mode="json")
    from_bytes = normalizer.parse(json.dumps(mock_record).encode("utf-8"), mode="json")
    from_mapping = normalizer.parse(mock_record, mode="json")

    assert from_string == from_mapping
    assert from_bytes == from_mapping


def test_parse_structured_experience(normalizer):
    """Test experience mapping, dates, ids and achievements."""
    profile = normalizer.parse(mock_record, mode="json")

    assert [exp.id for exp in profile.experience] == ["exp_0", "exp_1"]
    first = profile.experience[0]
    assert first.company == "Acme"
    assert first.title == "Senior Software Engineer"
    assert first.start_date == "2021-03-15"
    assert first.end_date == ""
    assert first.current is True
    assert first.achievements == ["throughput by 40%"]
    assert first.skills == ["Python", "Kafka"]

    second = profile.experience[1]
    assert second.title == "Software Engineer"
    assert second.end_date == "2021-02-28"
    assert second.current is False


def test_parse_structured_other_sections(normalizer):
    """Test education, skills, certifications, languages, projects and volunteer."""
    profile = normalizer.parse(mock_record, mode="json")

    edu = profile.education[0]
    assert edu.id == "edu_0"
    assert edu.institution == "University of Toronto"
    assert edu.degree == "BSc"
    assert edu.field == "Computer Science"
    assert edu.gpa == "3.8"

    assert profile.skills == ["Python", "SQL", "Go"]

    cert = profile.certifications[0]
    assert cert.id == "cert_0"
    assert cert.name == "AWS Solutions Architect"
    assert cert.issuer == "Amazon"
    assert cert.issue_date == "2022-05-01"

    assert [lang.name for lang in profile.languages] == ["English", "French", "Spanish"]
    assert [lang.proficiency for lang in profile.languages] == [
        "native",
        "professional",
        "professional",
    ]

    proj = profile.projects[0]
    assert proj.id == "proj_0"
    assert proj.name == "Portfolio"
    assert proj.url == "https://github.com/jane/portfolio"
    assert proj.skills == ["React"]
    assert proj.team_size == 3

    vol = profile.volunteer[0]
    assert vol.id == "vol_0"
    assert vol.organization == "Code Club"
    assert vol.role == "Mentor"
    assert vol.cause == "Education"


def test_parse_structured_primary_key_wins(normalizer):
    """Test that the primary key takes precedence over its alternates."""
    profile = normalizer.parse({"name": "Primary", "fullName": "Alternate"}, mode="json")
    assert profile.personal.name == "Primary"


def test_parse_structured_blank_primary_falls_back(normalizer):
    """Test that an empty primary value falls through to the alternate key."""
    profile = normalizer.parse({"name": "", "fullName": "Alternate"}, mode="json")
    assert profile.personal.name == "Alternate"


def test_parse_structured_empty_record(normalizer):
    """Test that an empty object yields an empty profile."""
    profile = normalizer.parse({}, mode="json")

    assert profile.personal.name == ""
    assert profile.experience == []
    assert profile.skills == []
    assert profile.contact.linkedin == ""


def test_parse_structured_non_list_field_is_empty(normalizer):
    """Test that a list field holding a scalar is treated as empty."""
    profile = normalizer.parse({"experience": "Acme", "skills": "Python"}, mode="json")

    assert profile.experience == []
    assert profile.skills == []


def test_parse_structured_skips_non_mapping_entries(normalizer):
    """Test that malformed entries are skipped and ids stay positional."""
    profile = normalizer.parse(
        {"experience": ["oops", {"company": "Acme", "title": "Engineer"}]}, mode="json"
    )

    assert len(profile.experience) == 1
    assert profile.experience[0].id == "exp_1"


def test_parse_structured_unparseable_date_kept(normalizer):
    """Test that a date that cannot be parsed is kept as given."""
    profile = normalizer.parse(
        {"experience": [{"company": "Acme", "title": "Engineer", "startDate": "Present"}]},
        mode="json",
    )
    assert profile.experience[0].start_date == "Present"


@pytest.mark.parametrize(
    "payload",
    ["{not json", "[1, 2, 3]", '"a string"', b"\xff\xfe"],
)
def test_parse_structured_malformed_raises(normalizer, payload):
    """Test that malformed structured input raises ParseError."""
    with pytest.raises(ParseError):
        normalizer.parse(payload, mode="json")


def test_parse_unknown_mode_raises(normalizer):
    with pytest.raises(ParseError):
        normalizer.parse("Jane Doe", mode="xml")


# Mock freeform profile text
mock_text = """Jane Doe
Senior Software Engineer
Based in Toronto, ON
jane@example.com | (416) 555-0199
https://www.linkedin.com/in/janedoe

About
Backend engineer focused on data platforms.

Experience
Senior Software Engineer
Acme
Built the ingestion platform.
Mentored four engineers.

Software Engineer
Globex

Education
University of Toronto
BSc Computer Science

Skills
Python, SQL
Kafka • Docker

Certifications
AWS Solutions Architect
"""


def test_parse_text_header_and_contact(normalizer):
    """Test name, headline, location and contact extraction from text."""
    profile = normalizer.parse(mock_text, mode="text")

    assert profile.personal.name == "Jane Doe"
    assert profile.personal.headline == "Senior Software Engineer"
    assert profile.personal.location == "Toronto, ON"
    assert profile.personal.summary == "Backend engineer focused on data platforms."
    assert profile.contact.email == "jane@example.com"
    assert profile.contact.phone == "(416) 555-0199"
    assert profile.contact.linkedin == "https://www.linkedin.com/in/janedoe"
    assert profile.contact.website == "https://www.linkedin.com/in/janedoe"


def test_parse_text_experience_and_education(normalizer):
    """Test block-based experience and education extraction."""
    profile = normalizer.parse(mock_text, mode="text")

    assert [exp.id for exp in profile.experience] == ["exp_0", "exp_1"]
    assert profile.experience[0].title == "Senior Software Engineer"
    assert profile.experience[0].company == "Acme"
    assert (
        profile.experience[0].description
        == "Built the ingestion platform. Mentored four engineers."
    )
    assert profile.experience[1].company == "Globex"
    assert profile.experience[1].description == ""

    assert len(profile.education) == 1
    assert profile.education[0].institution == "University of Toronto"
    assert profile.education[0].degree == "BSc Computer Science"


def test_parse_text_skills(normalizer):
    profile = normalizer.parse(mock_text, mode="text")
    assert profile.skills == ["Python", "SQL", "Kafka", "Docker"]


def test_parse_text_leaves_other_sections_empty(normalizer):
    """Test that certifications and similar sections are not extracted from text."""
    profile = normalizer.parse(mock_text, mode="text")

    assert profile.certifications == []
    assert profile.languages == []
    assert profile.projects == []
    assert profile.volunteer == []


def test_parse_text_single_line_block_skipped(normalizer):
    """Test that an experience block with fewer than two lines is skipped."""
    text = "Jane Doe\n\nExperience\nFreelancer\n\nEngineer\nAcme\n"
    profile = normalizer.parse(text, mode="text")

    assert len(profile.experience) == 1
    assert profile.experience[0].id == "exp_1"
    assert profile.experience[0].company == "Acme"


def test_parse_text_never_raises(normalizer):
    """Test that text mode accepts empty and arbitrary input."""
    assert normalizer.parse("", mode="text").personal.name == ""
    assert normalizer.parse("{not json", mode="text").personal.name == "{not json"


def test_extract_achievements_bullets_and_verbs():
    """Test bullet lines are collected before verb-led sentences."""
    description = "• Shipped v2\nReduced costs by 30%. Improved latency"
    assert extract_achievements(description) == [
        "Shipped v2",
        "costs by 30%",
        "latency",
    ]


def test_extract_achievements_ignores_mid_sentence_verbs():
    assert extract_achievements("The team has improved a lot") == []


def test_extract_achievements_empty():
    assert extract_achievements("") == []
