from datetime import datetime, timedelta, timezone

API = "/api/v1"
PASSWORD = "secret-pass-123"


def future_deadline(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def job_payload(**overrides) -> dict:
    payload = {
        "title": "Build a REST API",
        "description": "We need a backend engineer to build a small REST API with auth and tests.",
        "required_skills": ["python", "fastapi"],
        "budget": 1500,
        "budget_type": "fixed",
        "deadline": future_deadline(),
        "experience_level": "intermediate",
        "category": "api-development",
    }
    payload.update(overrides)
    return payload


def application_payload(**overrides) -> dict:
    payload = {
        "cover_letter": "I have shipped several FastAPI services in production and can start right away.",
        "proposed_rate": 50,
        "estimated_duration": "2 weeks",
    }
    payload.update(overrides)
    return payload
