"""
Job intake and posting fetch route tests
"""

from unittest.mock import AsyncMock, patch

from signalpage.services.job_posting_fetcher import JobPostingFetchError

from service_mocks import JOB_ID, mock_service, ok


class TestJobRoutes:

    def test_create_job_defaults(self, client):
        service = mock_service(create_job=ok([{"id": JOB_ID, "status": "draft"}]))
        with patch("signalpage.api.routes.jobs.get_jobs_service", return_value=service):
            response = client.post("/api/jobs", json={
                "company_name": "Acme", "role_title": "Engineer", "job_description": "Build things"
            })

        assert response.status_code == 201
        data = service.create_job.call_args.args[1]
        assert data["seniority_level"] == "mid"
        assert data["recruiter_name"] is None

    def test_create_job_requires_company(self, client):
        response = client.post("/api/jobs", json={"company_name": "", "role_title": "Engineer", "job_description": "x"})
        assert response.status_code == 422
        assert response.json()["error_count"] >= 1

    def test_update_without_fields(self, client):
        response = client.put(f"/api/jobs/{JOB_ID}", json={})
        assert response.status_code == 400


class TestFetchJobPosting:

    def test_returns_description(self, client):
        fetch = AsyncMock(return_value="About the role ...")
        with patch("signalpage.api.routes.jobs.fetch_job_posting", fetch):
            response = client.post("/api/fetch-job-posting", json={"url": "https://jobs.example.com/1"})

        assert response.status_code == 200
        assert response.json()["jobDescription"] == "About the role ..."
        assert response.json()["success"] is True

    def test_fetch_error_status_is_preserved(self, client):
        error = JobPostingFetchError("Could not access the page (HTTP 403). Please copy and paste the job description manually.")
        with patch("signalpage.api.routes.jobs.fetch_job_posting", AsyncMock(side_effect=error)):
            response = client.post("/api/fetch-job-posting", json={"url": "https://jobs.example.com/1"})

        assert response.status_code == 422
        assert response.json()["message"].startswith("Could not access the page (HTTP 403)")

    def test_missing_url(self, client):
        response = client.post("/api/fetch-job-posting", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "URL is required"
