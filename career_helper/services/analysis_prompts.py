from __future__ import annotations

from career_helper.core.config import settings

ATS_SYSTEM_PROMPT = (
    "You are an applicant tracking system reviewer. "
    "Score resumes for ATS compatibility and extract candidate details. "
    "Respond with a single JSON object and nothing else."
)

JOB_MATCH_SYSTEM_PROMPT = (
    "You are a recruiter comparing a resume to a target role. "
    "Respond with a single JSON object and nothing else."
)

ATS_SCHEMA = """{
  "overallScore": number (0-100),
  "sections": {
    "formatting": {"score": number, "feedback": string},
    "keywords": {"score": number, "feedback": string, "foundKeywords": string[]},
    "experience": {"score": number, "feedback": string},
    "education": {"score": number, "feedback": string},
    "skills": {"score": number, "feedback": string, "identifiedSkills": string[]}
  },
  "strengths": string[],
  "improvements": string[],
  "atsCompatibility": string,
  "candidateDetails": {
    "name": string,
    "email": string,
    "contactLinks": string[],
    "skills": string[],
    "education": string[],
    "workExperience": string[],
    "certifications": string[]
  }
}"""

JOB_MATCH_SCHEMA = """{
  "matchScore": number (0-100),
  "hireabilityProbability": number (0-100),
  "strengths": string[],
  "weaknesses": string[],
  "missingSkills": string[],
  "recommendations": {
    "toAdd": string[],
    "toRemove": string[],
    "toEnhance": string[]
  },
  "skillMatch": {"technical": number, "soft": number, "domain": number}
}"""


def truncate_resume_text(text: str, max_chars: int | None = None) -> str:
    limit = max_chars if max_chars is not None else settings.resume_prompt_max_chars
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit]


def build_ats_prompt(resume_text: str) -> str:
    return (
        "Analyze this resume for ATS compatibility and extract the candidate's details. "
        f"Return a JSON response with the following structure:\n{ATS_SCHEMA}\n\n"
        f"Resume text:\n{truncate_resume_text(resume_text)}"
    )


def build_job_match_prompt(resume_text: str, job_role: str, job_description: str = "") -> str:
    focus = " Focus specifically on the provided job description." if job_description else ""
    parts = [
        f"Compare this resume to the target job role and provide a detailed match analysis.{focus} "
        f"Return a JSON response with:\n{JOB_MATCH_SCHEMA}",
        f"Target Role: {job_role}",
    ]
    if job_description:
        parts.append(f"Job Description:\n{job_description}")
    parts.append(f"Resume:\n{truncate_resume_text(resume_text)}")
    return "\n\n".join(parts)
