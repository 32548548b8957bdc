"""
Signal page route tests: generation flow, editing and the public page
"""

import pytest
from unittest.mock import AsyncMock, patch

from signalpage.models.enums import JobStatus
from signalpage.models.job import ParsedJobRequirements
from signalpage.models.subscription import PageCreationCheck, UserSubscription
from signalpage.services.llm.types import GenerationError

from service_mocks import JOB_ID, PAGE_ID, USER_ID, failed, mock_service, not_found, ok

GENERATED = {
    "hero": {"tagline": "t", "value_promise": "v"},
    "fit_section": {"intro": None, "fit_bullets": []},
    "highlights": [],
    "plan_30_60_90": {},
    "case_studies": [],
    "ai_commentary": "Great match",
}


@pytest.fixture
def job(parsed_requirements_data):
    return {
        "id": JOB_ID,
        "user_id": USER_ID,
        "company_name": "Acme",
        "role_title": "Staff Engineer",
        "job_description": "Build the data platform",
        "seniority_level": "staff",
        "parsed_requirements": parsed_requirements_data,
    }


@pytest.fixture
def services(job, parsed_resume_data):
    """Patch every service the generate flow touches; yields them by name"""
    mocks = {
        "jobs": mock_service(get_job=ok([job]), set_status=ok([job]), save_requirements=ok([job])),
        "profiles": mock_service(get_profile=ok([{"id": USER_ID, "full_name": "Jane Doe"}])),
        "resumes": mock_service(get_primary_resume=ok([{"id": "r1", "parsed_data": parsed_resume_data}])),
        "pages": mock_service(create_page=ok([{"id": PAGE_ID, "slug": "acme-staff-engineer"}])),
        "gate": AsyncMock(return_value=PageCreationCheck(allowed=True, subscription=UserSubscription())),
        "generate": AsyncMock(return_value=dict(GENERATED)),
    }
    with patch("signalpage.api.routes.pages.get_jobs_service", return_value=mocks["jobs"]), \
            patch("signalpage.api.routes.pages.get_profiles_service", return_value=mocks["profiles"]), \
            patch("signalpage.api.routes.pages.get_resumes_service", return_value=mocks["resumes"]), \
            patch("signalpage.api.routes.pages.get_signal_pages_service", return_value=mocks["pages"]), \
            patch("signalpage.api.routes.pages.can_user_create_page", mocks["gate"]), \
            patch("signalpage.api.routes.pages.generate_full_page", mocks["generate"]):
        yield mocks


def _statuses(jobs_service):
    return [call.args[2] for call in jobs_service.set_status.call_args_list]


class TestGeneratePage:

    def test_generates_and_stores_page(self, client, services):
        response = client.post("/api/generate-page", json={"jobId": JOB_ID})

        assert response.status_code == 200
        assert response.json()["page"]["id"] == PAGE_ID

        user_id, job_id, slug, content = services["pages"].create_page.call_args.args
        assert (user_id, job_id, slug) == (USER_ID, JOB_ID, "acme-staff-engineer")
        assert content["match_score"] == 73
        assert content["match_breakdown"]["missing_skills"] == ["rust"]
        assert content["ai_commentary"] == "Great match"
        assert _statuses(services["jobs"]) == [JobStatus.GENERATING, JobStatus.DRAFT]
        services["jobs"].save_requirements.assert_not_called()

    def test_parses_requirements_when_missing(self, client, services, job, parsed_requirements_data):
        services["jobs"].get_job.return_value = ok([{**job, "parsed_requirements": None}])
        parse = AsyncMock(return_value=ParsedJobRequirements.model_validate(parsed_requirements_data))

        with patch("signalpage.api.routes.pages.parse_job_description", parse):
            response = client.post("/api/generate-page", json={"jobId": JOB_ID})

        assert response.status_code == 200
        parse.assert_awaited_once_with("Build the data platform")
        services["jobs"].save_requirements.assert_awaited_once()

    def test_slug_conflict_retries_with_suffix(self, client, services):
        services["pages"].create_page.side_effect = [
            failed("CONFLICT_ERROR", "Record already exists"),
            ok([{"id": PAGE_ID, "slug": "acme-staff-engineer-abc"}]),
        ]

        response = client.post("/api/generate-page", json={"jobId": JOB_ID})

        assert response.status_code == 200
        retry_slug = services["pages"].create_page.call_args_list[1].args[2]
        assert retry_slug.startswith("acme-staff-engineer-")
        assert retry_slug != "acme-staff-engineer"

    def test_page_limit_is_403(self, client, services):
        reason = "You've reached your limit of 1 page. Upgrade to Pro for unlimited pages."
        services["gate"].return_value = PageCreationCheck(allowed=False, reason=reason, subscription=UserSubscription())

        response = client.post("/api/generate-page", json={"jobId": JOB_ID})

        assert response.status_code == 403
        assert response.json()["message"] == reason
        services["generate"].assert_not_called()
        services["jobs"].set_status.assert_not_called()

    def test_generation_failure_resets_status(self, client, services):
        services["generate"].side_effect = GenerationError("bad json")

        response = client.post("/api/generate-page", json={"jobId": JOB_ID})

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to generate page"
        assert _statuses(services["jobs"])[-1] == JobStatus.DRAFT

    def test_missing_job_id(self, client, services):
        response = client.post("/api/generate-page", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Job ID is required"

    def test_unknown_job_is_404(self, client, services):
        services["jobs"].get_job.return_value = not_found()
        response = client.post("/api/generate-page", json={"jobId": JOB_ID})
        assert response.status_code == 404
        assert response.json()["message"] == "Job not found"

    def test_missing_resume_is_400(self, client, services):
        services["resumes"].get_primary_resume.return_value = not_found()
        response = client.post("/api/generate-page", json={"jobId": JOB_ID})
        assert response.status_code == 400
        assert response.json()["message"].startswith("Resume not found")


class TestEditPage:

    def test_publish_marks_job_published(self, client):
        pages = mock_service(apply_edit=ok([{"id": PAGE_ID, "job_id": JOB_ID, "is_published": True, "version": 2}]))
        jobs = mock_service(set_status=ok([{}]))

        with patch("signalpage.api.routes.pages.get_signal_pages_service", return_value=pages), \
                patch("signalpage.api.routes.pages.get_jobs_service", return_value=jobs):
            response = client.patch(f"/api/pages/{PAGE_ID}", json={"is_published": True})

        assert response.status_code == 200
        pages.apply_edit.assert_awaited_once_with(USER_ID, PAGE_ID, {"is_published": True})
        jobs.set_status.assert_awaited_once_with(USER_ID, JOB_ID, JobStatus.PUBLISHED)

    def test_empty_edit_is_400(self, client):
        response = client.patch(f"/api/pages/{PAGE_ID}", json={})
        assert response.status_code == 400

    def test_other_users_page_is_404(self, client):
        pages = mock_service(delete_page=not_found())
        with patch("signalpage.api.routes.pages.get_signal_pages_service", return_value=pages):
            response = client.delete(f"/api/pages/{PAGE_ID}")
        assert response.status_code == 404
        assert response.json()["message"] == "Page not found"


class TestPublicPage:

    def test_username_is_lowercased(self, anonymous_client):
        bundle = {"page": {"id": PAGE_ID}, "job": {"company_name": "Acme"}, "profile": {"username": "jane"}}
        pages = mock_service(get_published_page=ok([bundle]))

        with patch("signalpage.api.routes.pages.get_signal_pages_service", return_value=pages):
            response = anonymous_client.get("/api/public/Jane/acme-staff-engineer")

        assert response.status_code == 200
        assert response.json() == bundle
        pages.get_published_page.assert_awaited_once_with("jane", "acme-staff-engineer")

    def test_unpublished_page_is_404(self, anonymous_client):
        pages = mock_service(get_published_page=not_found())
        with patch("signalpage.api.routes.pages.get_signal_pages_service", return_value=pages):
            response = anonymous_client.get("/api/public/jane/draft-page")
        assert response.status_code == 404
