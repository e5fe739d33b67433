import os
import unittest
from dataclasses import replace
from unittest.mock import patch

# Keep API tests deterministic and fast by default.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("ANALYSIS_LLM_ENABLED", "0")

from fastapi.testclient import TestClient  # noqa: E402

from storage_case import TempStorageTestCase  # noqa: E402

from career_helper.core.rate_limit import limiter  # noqa: E402
from career_helper.main import app  # noqa: E402
from career_helper.parsing import extract as extract_module  # noqa: E402
from career_helper.services import analysis_llm, resume_service  # noqa: E402

RESUME_TEXT = (
    "Jane Doe\n"
    "jane@example.com\n"
    "Senior Backend Engineer with Python, FastAPI and PostgreSQL.\n"
)


class ResumeApiTests(TempStorageTestCase):
    @classmethod
    def setUpClass(cls):
        limiter.enabled = False
        cls.client = TestClient(app)

    def setUp(self):
        super().setUp()
        self.headers = {"X-User-Id": "user-1"}

    def _upload(self, filename: str, content: bytes, content_type: str, headers: dict | None = None):
        return self.client.post(
            "/v1/resumes",
            files={"file": (filename, content, content_type)},
            headers=headers if headers is not None else self.headers,
        )

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_user_header_is_required(self):
        response = self._upload("cv.txt", RESUME_TEXT.encode(), "text/plain", headers={})
        self.assertEqual(response.status_code, 401)

    def test_upload_text_resume_becomes_current(self):
        response = self._upload("cv.txt", RESUME_TEXT.encode(), "text/plain")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["resume"]["text"], RESUME_TEXT)
        self.assertEqual(body["extraction"]["method"], "passthrough")

        current = self.client.get("/v1/resumes/current", headers=self.headers)
        self.assertEqual(current.status_code, 200)
        self.assertEqual(current.json()["id"], body["resume"]["id"])

        listing = self.client.get("/v1/resumes", headers=self.headers)
        self.assertEqual([item["id"] for item in listing.json()], [body["resume"]["id"]])
        self.assertNotIn("text", listing.json()[0])

    def test_unsupported_type_returns_415(self):
        response = self._upload("photo.png", b"\x89PNG\r\n\x1a\n", "image/png")
        self.assertEqual(response.status_code, 415)
        self.assertEqual(response.json()["detail"], "Only PDF and DOCX files are allowed")

    def test_signature_mismatch_returns_400(self):
        response = self._upload("cv.pdf", b"not a pdf", "application/pdf")
        self.assertEqual(response.status_code, 400)

    def test_unextractable_pdf_returns_422(self):
        with patch.object(extract_module, "_text_layer_pages", return_value=[""]), patch.object(
            extract_module, "_rasterize_pages", return_value=iter([object()])
        ), patch.object(extract_module, "_recognize", return_value="") as recognize:
            response = self._upload("scan.pdf", b"%PDF-1.7\n", "application/pdf")
        self.assertEqual(response.status_code, 422)
        recognize.assert_called_once()
        self.assertEqual(self.client.get("/v1/resumes/current", headers=self.headers).status_code, 404)

    def test_delete_resume(self):
        resume_id = self._upload("cv.txt", RESUME_TEXT.encode(), "text/plain").json()["resume"]["id"]
        other_user = {"X-User-Id": "user-2"}
        self.assertEqual(self.client.delete(f"/v1/resumes/{resume_id}", headers=other_user).status_code, 404)
        self.assertEqual(self.client.delete(f"/v1/resumes/{resume_id}", headers=self.headers).status_code, 204)
        self.assertEqual(self.client.get("/v1/resumes/current", headers=self.headers).status_code, 404)


class AnalysisApiTests(TempStorageTestCase):
    @classmethod
    def setUpClass(cls):
        limiter.enabled = False
        cls.client = TestClient(app)

    def setUp(self):
        super().setUp()
        self.headers = {"X-User-Id": "recruiter-1"}

    def _upload(self, filename: str, text: str) -> str:
        response = self.client.post(
            "/v1/resumes",
            files={"file": (filename, text.encode(), "text/plain")},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        return response.json()["resume"]["id"]

    def test_ats_analysis_without_resume_returns_404(self):
        response = self.client.post("/v1/analyses/ats", json={}, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_ats_analysis_with_llm_disabled_returns_503(self):
        self._upload("cv.txt", RESUME_TEXT)
        disabled = replace(analysis_llm.settings, analysis_llm_enabled=False)
        with patch.object(analysis_llm, "settings", disabled):
            response = self.client.post("/v1/analyses/ats", json={}, headers=self.headers)
        self.assertEqual(response.status_code, 503)

    def test_job_match_requires_role(self):
        self._upload("cv.txt", RESUME_TEXT)
        response = self.client.post("/v1/analyses/job-match", json={"job_role": ""}, headers=self.headers)
        self.assertEqual(response.status_code, 422)

    def test_analyses_feed_candidate_search(self):
        payloads = {
            "ana.txt": ("Ana: accountant, audits, Excel", {"name": "Ana", "email": "ana@x.io"}, 90),
            "ben.txt": ("Ben: Python engineer, Docker, Kubernetes", {"name": "Ben", "email": "ben@x.io"}, 70),
            "cy.txt": ("Cy: product designer, Figma", {"name": "Cy", "email": "cy@x.io"}, 95),
        }
        for filename, (text, details, score) in payloads.items():
            resume_id = self._upload(filename, text)
            analysis = {"overallScore": score, "candidateDetails": details}
            with patch.object(resume_service, "json_completion_required", return_value=analysis):
                response = self.client.post(
                    "/v1/analyses/ats", json={"resume_id": resume_id}, headers=self.headers
                )
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["type"], "ats")

        by_score = self.client.get("/v1/candidates/search", headers=self.headers).json()
        self.assertEqual([c["score"] for c in by_score["candidates"]], [95, 90, 70])
        self.assertNotIn("resume_text", by_score["candidates"][0])

        by_fit = self.client.get(
            "/v1/candidates/search",
            params={"job_description": "Python engineer, Kubernetes", "limit": 2},
            headers=self.headers,
        ).json()
        self.assertEqual(by_fit["limit"], 2)
        self.assertEqual([c["name"] for c in by_fit["candidates"]], ["Ben", "Cy"])
        self.assertEqual(by_fit["candidates"][0]["match_score"], 3)

        clamped = self.client.get(
            "/v1/candidates/search", params={"limit": 0}, headers=self.headers
        ).json()
        self.assertEqual(clamped["limit"], 1)
        self.assertEqual(len(clamped["candidates"]), 1)

        listing = self.client.get("/v1/analyses", params={"type": "ats"}, headers=self.headers)
        self.assertEqual(len(listing.json()), 3)


if __name__ == "__main__":
    unittest.main()
