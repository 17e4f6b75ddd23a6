import pytest

from jobsnap.models import (
    Block,
    CompanyInformation,
    CompensationBenefits,
    JobRecord,
    ResponsibilitiesSection,
    SkillsExpertise,
)
from jobsnap.parser import parse_job_html
from jobsnap.renderer import MD_HEADINGS, JobRenderer, render_job_markdown

EXPECTED_SAMPLE = """---
job_id: 1436685
url: "https://bdjobs.com/jobs/details/1436685"
saved_at: "2024-12-01T10:00:00+00:00"
title: AI Engineer
company: Acme Ltd
application_deadline: 25 Dec 2024
published: 1 Dec 2024
source: bdjobs
parser_version: 0.3.0
---

# AI Engineer

**Company:** Acme Ltd

**Application Deadline:** 25 Dec 2024

## Summary
- Vacancy: 2
- Location: Dhaka

## Requirements

### Education
- BSc in CSE

### Experience
At least 3 years in machine learning.

## Responsibilities & Context

### Key Responsibilities
- Build models

## Read Before Apply
Mention the job id in the subject.
"""


def _h2_headings(markdown):
    return [line[3:] for line in markdown.split("\n") if line.startswith("## ")]


def test_render_sample_job(sample_job):
    assert render_job_markdown(sample_job) == EXPECTED_SAMPLE


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, '""'),
        ("", '""'),
        ("   ", '""'),
        ("Acme Ltd", "Acme Ltd"),
        ("Role: Lead", '"Role: Lead"'),
        ("line one\nline two", '"line one\\nline two"'),
        ('Say "hi"', 'Say \\"hi\\"'),
        ("Café", "Café"),
    ],
)
def test_yaml_escape(value, expected):
    assert JobRenderer.yaml_escape(value) == expected


def test_label():
    assert JobRenderer.label("employment_status") == "Employment Status"
    assert JobRenderer.label("vacancy") == "Vacancy"


def test_front_matter_has_fixed_keys():
    front_matter = JobRenderer.render_front_matter(JobRecord())
    keys = [line.split(":", 1)[0] for line in front_matter.split("\n")[1:-1]]
    assert keys == [
        "job_id",
        "url",
        "saved_at",
        "title",
        "company",
        "application_deadline",
        "published",
        "source",
        "parser_version",
    ]
    assert 'job_id: ""' in front_matter


def test_render_placeholder_title():
    """Test that a record without a title still renders."""
    markdown = render_job_markdown(JobRecord())
    assert "\n# Job Circular" in markdown
    assert markdown.endswith("\n")
    assert not markdown.endswith("\n\n")


def test_render_raw_text_only():
    job = JobRecord(title="Title", company="Company", raw_text="Plain words.")
    markdown = render_job_markdown(job)
    assert _h2_headings(markdown) == ["Raw Text"]
    assert markdown.endswith("## Raw Text\nPlain words.\n")


def test_render_section_exclusivity():
    """Test that raw text is never rendered next to a structured section."""
    job = JobRecord(
        title="Title",
        requirements={"education": Block(bullets=["BSc"])},
        raw_text="Plain words.",
    )
    markdown = render_job_markdown(job)
    assert "## Requirements" in markdown
    assert "## Raw Text" not in markdown
    assert "Plain words." not in markdown


def test_render_skips_empty_sections():
    job = JobRecord(
        title="Title",
        summary={},
        requirements={"education": Block()},
        skills_expertise=SkillsExpertise(),
        read_before_apply="   ",
    )
    assert _h2_headings(render_job_markdown(job)) == []


def test_render_requirements_order():
    requirements = {
        "preferred_qualifications": Block(bullets=["Kaggle"]),
        "education": Block(bullets=["BSc"]),
    }
    rendered = JobRenderer.render_requirements(requirements)
    assert rendered.index("### Education") < rendered.index("### Preferred Qualifications")


def test_render_skills():
    skills = SkillsExpertise(skills=["Python"], suggested_by_bdjobs=["Docker"])
    assert JobRenderer.render_skills(skills) == (
        "## Skills & Expertise\n### Skills\n- Python\n### Suggested By Bdjobs\n- Docker"
    )


def test_render_compensation():
    compensation = CompensationBenefits(benefits=["Lunch"], details={"employment_status": "Full Time"})
    assert JobRenderer.render_compensation(compensation) == (
        "## Compensation & Other Benefits\n- Lunch\n### Details\n- Employment Status: Full Time"
    )


def test_render_company_variants():
    details = CompanyInformation(details={"address": "Gulshan"})
    raw = CompanyInformation(raw_text="Acme builds robots.")
    assert JobRenderer.render_company(details) == "## Company Information\n- Address: Gulshan"
    assert JobRenderer.render_company(raw) == "## Company Information\nAcme builds robots."


def test_render_responsibilities_raw_text():
    section = ResponsibilitiesSection(raw_text="- Build models")
    assert JobRenderer.render_responsibilities(section) == "## Responsibilities & Context\n- Build models"


def test_rendered_headings_are_whitelisted(state_page_html, text_page_html):
    for html in (state_page_html, text_page_html):
        markdown = render_job_markdown(parse_job_html(html, job_id="1"))
        headings = _h2_headings(markdown)
        assert headings
        assert set(headings) <= set(MD_HEADINGS)


def test_round_trip_scenario(make_state_html):
    html = make_state_html(
        {"JobTitle": "AI Engineer", "CompnayName": "Acme Ltd", "EducationRequirements": "<li>BSc in CSE</li>"}
    )
    markdown = render_job_markdown(parse_job_html(html, job_id="1436685"))
    assert "### Education\n- BSc in CSE" in markdown
    assert "# AI Engineer" in markdown


def test_fallback_scenario_renders_only_raw_text():
    html = "<html><head><title>Title - Company</title></head><body><p>Just words.</p></body></html>"
    markdown = render_job_markdown(parse_job_html(html))

    assert markdown.startswith("---\n")
    assert "\n# Title\n" in markdown
    assert _h2_headings(markdown) == ["Raw Text"]
    assert "### " not in markdown


# --- Body escaping ---


@pytest.mark.parametrize(
    "text,expected",
    [
        ("## Bonus", "\\## Bonus"),
        ("Intro\n### Perks\n  # Lunch", "Intro\n\\### Perks\n\\# Lunch"),
        ("C# developer", "C# developer"),
        (None, ""),
    ],
)
def test_body_text_escapes_leading_hash(text, expected):
    assert JobRenderer.body_text(text) == expected


def test_body_text_with_heading_lines_keeps_whitelist():
    """Test that page text shaped like a heading never becomes one."""
    job = JobRecord(
        title="Title",
        requirements={"education": Block(text="Intro\n## Bonus")},
        responsibilities_context=ResponsibilitiesSection(raw_text="## The Role\nBuild things"),
        compensation_other_benefits=CompensationBenefits(benefits=["Lunch\n## Perks"]),
        read_before_apply="## Apply now",
        company_information=CompanyInformation(raw_text="## About us"),
    )
    markdown = render_job_markdown(job)

    assert set(_h2_headings(markdown)) <= set(MD_HEADINGS)
    assert "\\## Bonus" in markdown
    assert "\\## Apply now" in markdown


def test_parsed_page_with_heading_text_keeps_whitelist():
    html = "<title>T - C</title><h2>Requirements</h2><h3>Education</h3><p>Intro</p><p>## Bonus</p>"
    markdown = render_job_markdown(parse_job_html(html))

    assert "\\## Bonus" in markdown
    assert "Bonus" not in _h2_headings(markdown)
    assert set(_h2_headings(markdown)) <= set(MD_HEADINGS)
