# ---------- TESTS FOR PROFILE VALIDATOR ----------

import pytest

from folioai.config.profile_schemas import PersonalInfo, Profile, WorkExperience
from folioai.services.validator import validate_profile
from folioai.utils.exceptions import ValidationFailure


@pytest.fixture
def valid_profile():
    return Profile(
        personal=PersonalInfo(name="Jane Doe", headline="Senior Software Engineer"),
        experience=[WorkExperience(id="exp_0", company="Acme", title="Engineer")],
    )


def test_validate_profile_valid(valid_profile):
    report = validate_profile(valid_profile)

    assert report.valid is True
    assert report.errors == []
    report.raise_for_errors()  # no-op when valid


def test_validate_profile_empty_reports_all_errors():
    """Test that an empty profile reports name, headline and experience at once."""
    report = validate_profile(Profile())

    assert report.valid is False
    assert report.errors == [
        "Name is required",
        "Professional headline is required",
        "At least one work experience entry is required",
    ]


def test_validate_profile_whitespace_name_is_missing(valid_profile):
    profile = valid_profile.model_copy(
        update={"personal": PersonalInfo(name="   ", headline="Engineer")}
    )
    assert validate_profile(profile).errors == ["Name is required"]


def test_validate_profile_incomplete_experience_entries(valid_profile):
    """Test that each incomplete experience entry is reported with its 1-based index."""
    profile = valid_profile.model_copy(
        update={
            "experience": [
                WorkExperience(id="exp_0", company="Acme", title="Engineer"),
                WorkExperience(id="exp_1", company="", title="Engineer"),
                WorkExperience(id="exp_2", company="Globex", title=""),
            ]
        }
    )
    report = validate_profile(profile)

    assert report.errors == [
        "Experience entry 2 is missing company or title",
        "Experience entry 3 is missing company or title",
    ]


def test_raise_for_errors_carries_every_error():
    report = validate_profile(Profile())

    with pytest.raises(ValidationFailure) as exc_info:
        report.raise_for_errors()
    assert len(exc_info.value.errors) == 3
