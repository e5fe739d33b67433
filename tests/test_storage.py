import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from storage_case import TempStorageTestCase

from career_helper.storage import db


def _ats_payload(name: str, email: str | None, score: int) -> dict:
    details = {"name": name, "skills": ["Python"], "workExperience": ["Acme"], "education": ["BSc"]}
    if email is not None:
        details["email"] = email
    return {"overallScore": score, "candidateDetails": details}


class ResumeStorageTests(TempStorageTestCase):
    def test_save_and_fetch_resume_scoped_to_user(self):
        resume = db.save_resume(user_id="u1", name="cv.pdf", text="Jane Doe", file_type="application/pdf")
        self.assertEqual(db.get_resume(resume.id), resume)
        self.assertEqual(db.get_resume(resume.id, user_id="u1"), resume)
        self.assertIsNone(db.get_resume(resume.id, user_id="u2"))

    def test_list_resumes_newest_first(self):
        older = db.save_resume(
            user_id="u1", name="old.txt", text="a", file_type="text/plain", uploaded_at="2024-01-01T00:00:00+00:00"
        )
        newer = db.save_resume(
            user_id="u1", name="new.txt", text="b", file_type="text/plain", uploaded_at="2024-06-01T00:00:00+00:00"
        )
        db.save_resume(user_id="u2", name="other.txt", text="c", file_type="text/plain")
        self.assertEqual([r.id for r in db.list_resumes("u1")], [newer.id, older.id])

    def test_current_resume_pointer(self):
        first = db.save_resume(user_id="u1", name="a.txt", text="a", file_type="text/plain")
        second = db.save_resume(user_id="u1", name="b.txt", text="b", file_type="text/plain")
        self.assertIsNone(db.get_current_resume("u1"))

        db.set_current_resume("u1", first.id)
        db.set_current_resume("u1", second.id)
        self.assertEqual(db.get_current_resume("u1").id, second.id)

        db.clear_current_resume("u1")
        self.assertIsNone(db.get_current_resume("u1"))

    def test_delete_resume_drops_pointer(self):
        resume = db.save_resume(user_id="u1", name="a.txt", text="a", file_type="text/plain")
        db.set_current_resume("u1", resume.id)
        self.assertFalse(db.delete_resume(resume.id, user_id="u2"))
        self.assertTrue(db.delete_resume(resume.id, user_id="u1"))
        self.assertIsNone(db.get_resume(resume.id))
        self.assertIsNone(db.get_current_resume("u1"))


class AnalysisStorageTests(TempStorageTestCase):
    def setUp(self):
        super().setUp()
        self.resume = db.save_resume(
            user_id="u1", name="jane.pdf", text="Python engineer", file_type="application/pdf"
        )

    def test_same_email_and_type_keeps_only_latest(self):
        db.save_analysis(
            user_id="u1", resume_id=self.resume.id, analysis_type="ats", data=_ats_payload("Jane", "j@x.io", 60)
        )
        latest = db.save_analysis(
            user_id="u1", resume_id=self.resume.id, analysis_type="ats", data=_ats_payload("Jane", "j@x.io", 80)
        )
        analyses = db.list_analyses("u1", "ats")
        self.assertEqual(len(analyses), 1)
        self.assertEqual(analyses[0].id, latest.id)
        self.assertEqual(analyses[0].data["overallScore"], 80)

    def test_uniqueness_is_per_user_and_type(self):
        payload = _ats_payload("Jane", "j@x.io", 70)
        db.save_analysis(user_id="u1", resume_id=self.resume.id, analysis_type="ats", data=payload)
        db.save_analysis(user_id="u1", resume_id=self.resume.id, analysis_type="job-match", data=payload)
        db.save_analysis(user_id="u2", resume_id=self.resume.id, analysis_type="ats", data=payload)
        self.assertEqual(len(db.list_analyses("u1")), 2)
        self.assertEqual(len(db.list_analyses("u2")), 1)

    def test_analyses_without_email_are_not_deduplicated(self):
        for score in (10, 20):
            db.save_analysis(
                user_id="u1", resume_id=self.resume.id, analysis_type="job-match", data={"matchScore": score}
            )
        self.assertEqual(len(db.list_analyses("u1", "job-match")), 2)

    def test_get_analysis_for_resume_returns_latest(self):
        db.save_analysis(user_id="u1", resume_id=self.resume.id, analysis_type="job-match", data={"matchScore": 1})
        latest = db.save_analysis(
            user_id="u1", resume_id=self.resume.id, analysis_type="job-match", data={"matchScore": 2}
        )
        found = db.get_analysis_for_resume(user_id="u1", resume_id=self.resume.id, analysis_type="job-match")
        self.assertEqual(found.id, latest.id)
        self.assertIsNone(db.get_analysis_for_resume(user_id="u1", resume_id=self.resume.id, analysis_type="ats"))

    def test_unknown_analysis_type_is_rejected(self):
        with self.assertRaises(ValueError):
            db.save_analysis(user_id="u1", resume_id=self.resume.id, analysis_type="roadmap", data={})


class CandidateLoadingTests(TempStorageTestCase):
    def test_candidates_join_resume_text_and_apply_defaults(self):
        resume = db.save_resume(user_id="u1", name="jane.pdf", text="Python engineer", file_type="application/pdf")
        db.save_analysis(
            user_id="u1",
            resume_id=resume.id,
            analysis_type="ats",
            data={"candidateDetails": {"skills": "not-a-list"}},
        )
        candidates = db.load_candidates("u1")
        self.assertEqual(len(candidates), 1)
        candidate = candidates[0]
        self.assertEqual(candidate.name, "Unknown")
        self.assertEqual(candidate.email, "N/A")
        self.assertEqual(candidate.score, 0)
        self.assertEqual(candidate.skills, [])
        self.assertEqual(candidate.resume_name, "jane.pdf")
        self.assertEqual(candidate.resume_text, "Python engineer")

    def test_stored_nan_score_loads_as_zero(self):
        resume = db.save_resume(user_id="u1", name="odd.txt", text="odd", file_type="text/plain")
        payload = _ats_payload("Odd", "odd@x.io", 0)
        payload["overallScore"] = float("nan")
        db.save_analysis(user_id="u1", resume_id=resume.id, analysis_type="ats", data=payload)
        self.assertEqual(db.load_candidates("u1")[0].score, 0)

    def test_skips_job_match_missing_details_and_deleted_resumes(self):
        kept = db.save_resume(user_id="u1", name="kept.txt", text="kept", file_type="text/plain")
        dropped = db.save_resume(user_id="u1", name="gone.txt", text="gone", file_type="text/plain")
        db.save_analysis(user_id="u1", resume_id=kept.id, analysis_type="ats", data=_ats_payload("Kept", "k@x.io", 70))
        db.save_analysis(user_id="u1", resume_id=kept.id, analysis_type="ats", data={"overallScore": 90})
        db.save_analysis(user_id="u1", resume_id=kept.id, analysis_type="job-match", data=_ats_payload("M", "m@x.io", 1))
        db.save_analysis(
            user_id="u1", resume_id=dropped.id, analysis_type="ats", data=_ats_payload("Gone", "g@x.io", 99)
        )
        db.delete_resume(dropped.id, user_id="u1")

        candidates = db.load_candidates("u1")
        self.assertEqual([c.name for c in candidates], ["Kept"])
        self.assertEqual(candidates[0].experience, ["Acme"])
        self.assertEqual(candidates[0].score, 70)


class AiRunRetentionTests(TempStorageTestCase):
    def test_purge_removes_only_expired_runs(self):
        db.log_ai_analysis_run(run_id="new", tool_slug="ats", model="m", schema_valid=True, status="success")
        old_time = (datetime.now(timezone.utc) - timedelta(days=400)).isoformat()
        with patch.object(db, "_utc_now", return_value=old_time):
            db.log_ai_analysis_run(run_id="old", tool_slug="ats", model="m", schema_valid=False, status="error")

        self.assertEqual(db.purge_old_records(), {"ai_analysis_runs": 1})
        self.assertEqual([run["run_id"] for run in db.list_ai_analysis_runs()], ["new"])


if __name__ == "__main__":
    unittest.main()
