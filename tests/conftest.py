import json
import os

import pytest

# Keep a developer's own JOBSNAP_* settings out of the test run
for _name in ("JOBSNAP_OUTPUT_DIR", "JOBSNAP_FILENAME_TEMPLATE", "JOBSNAP_SKIP_EXISTING", "JOBSNAP_HTTP_TIMEOUT"):
    os.environ.pop(_name, None)

from jobsnap.models import Block, JobRecord, ResponsibilitiesSection  # noqa: E402

# Raw job-details record as the site embeds it in ng-state
SAMPLE_DETAILS = {
    "JobId": 1436685,
    "JobTitle": "AI Engineer",
    "CompnayName": "Acme Ltd",
    "Deadline": "25 Dec 2024",
    "PostedOn": "1 Dec 2024",
    "JobVacancies": "2",
    "Age": "Na",
    "JobLocation": "Dhaka",
    "JobSalaryRangeText": "Negotiable",
    "EducationRequirements": "<ul><li>BSc in CSE</li></ul>",
    "experience": "<ul><li>At least 3 years</li></ul>",
    "AdditionJobRequirements": (
        "<p>Requirements</p><ul><li>Python and SQL</li></ul>"
        "<p>Preferred Qualifications</p><ul><li>Published research</li></ul>"
    ),
    "JobDescription": "<p>Key Responsibilities</p><ul><li>Build models</li><li>Ship APIs</li></ul>",
    "SkillsRequired": "Python, PyTorch",
    "SuggestedSkills": "MLOps",
    "JobOtherBenifits": "<ul><li>Lunch</li><li>Health insurance</li></ul>",
    "JobWorkPlace": "Work at office,Hybrid",
    "JobNature": "Full Time",
    "Gender": "N/A",
    "CompanyAddress": "Gulshan, Dhaka",
    "CompanyBusiness": "Software",
}

# Visible part of the same page; the embedded record disagrees on purpose
STATE_PAGE_BODY = """
<h2>Summary</h2>
<p>Vacancy: 5</p>
<p>Location: Sylhet</p>
<h2>Read Before Apply</h2>
<p>Mention the job id in the subject.</p>
"""

# A page with no embedded record, only visible sections
TEXT_PAGE_HTML = """
<!DOCTYPE html>
<html>
<head><title>Data Analyst - Beta Corp | bdjobs.com</title></head>
<body>
    <h1>Data Analyst</h1>
    <div>Application Deadline: 30 Jan 2025</div>
    <h2>Summary</h2>
    <p>Vacancy: 3</p>
    <p>Age: 25 to 35 years</p>
    <p>Location: Chattogram</p>
    <p>Published: 10 Jan 2025</p>
    <h2>Requirements</h2>
    <h3>Education</h3>
    <ul><li>Bachelor degree in Statistics</li></ul>
    <h3>Experience</h3>
    <ul><li>2 to 4 years</li></ul>
    <h2>Responsibilities &amp; Context</h2>
    <h3>Job Context</h3>
    <p>Support the sales team.</p>
    <h3>Job Responsibilities</h3>
    <ul><li>Prepare weekly reports</li><li>Clean datasets</li></ul>
    <h2>Skills &amp; Expertise</h2>
    <ul><li>SQL</li><li>Excel</li></ul>
    <p>Suggested by Bdjobs</p>
    <ul><li>Power BI</li></ul>
    <h2>Compensation &amp; Other Benefits</h2>
    <ul><li>Mobile bill</li><li>Yearly bonus</li></ul>
    <p>Workplace</p>
    <p>Work at office</p>
    <h2>Read Before Apply</h2>
    <p>Apply with a cover letter.</p>
    <h2>Company Information</h2>
    <p>Address: Agrabad, Chattogram</p>
    <p>Business: Trading</p>
    <div>Report this Job / Company</div>
    <div>Need any support?</div>
</body>
</html>
"""


def build_state_html(details: dict | None, body: str = "", title: str = "AI Engineer - Acme Ltd | bdjobs.com") -> str:
    """Wrap a job-details record in an ng-state script the way the site serves it."""
    state = {
        "1234567": {
            "u": "https://api.example/jobs/Job-Details?jobId=1436685",
            "b": {"data": [details] if details is not None else []},
        },
        "7654321": {"u": "https://api.example/Menu", "b": {"data": []}},
    }
    # Escape "<" the way an inline JSON script has to, json.loads restores it
    payload = json.dumps(state).replace("<", "\\u003c")
    return (
        "<!DOCTYPE html>\n<html>\n"
        f"<head><title>{title}</title></head>\n"
        f'<body>\n<script id="ng-state" type="application/json">{payload}</script>\n'
        f"{body}\n</body>\n</html>\n"
    )


@pytest.fixture
def state_page_html():
    """A full page with an embedded job-details record."""
    return build_state_html(SAMPLE_DETAILS, STATE_PAGE_BODY)


@pytest.fixture
def text_page_html():
    """A full page with visible sections only."""
    return TEXT_PAGE_HTML


@pytest.fixture
def make_state_html():
    """Factory for pages with a custom job-details record."""
    return build_state_html


@pytest.fixture
def sample_job():
    """A reusable, fully parsed JobRecord."""
    return JobRecord(
        job_id="1436685",
        url="https://bdjobs.com/jobs/details/1436685",
        saved_at="2024-12-01T10:00:00+00:00",
        title="AI Engineer",
        company="Acme Ltd",
        application_deadline="25 Dec 2024",
        published="1 Dec 2024",
        summary={"vacancy": "2", "location": "Dhaka"},
        requirements={
            "education": Block(bullets=["BSc in CSE"]),
            "experience": Block(text="At least 3 years in machine learning."),
        },
        responsibilities_context=ResponsibilitiesSection(
            sections={"Key Responsibilities": Block(bullets=["Build models"])}
        ),
        read_before_apply="Mention the job id in the subject.",
    )
