"""Demo: a tutor builds a course, a student works through it.

Runs against the in-memory repositories through FastAPI's TestClient.

Run with:
    python scripts/demo_progress_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.main import app

TUTOR_EMAIL = "tutor@example.com"
STUDENT_EMAIL = "student@example.com"
PASSWORD = "demo-password"


def _register(client: TestClient, email: str, role: str) -> str:
    r = client.post(
        "/auth/register",
        json={
            "email": email,
            "password": PASSWORD,
            "first_name": role.title(),
            "last_name": "Demo",
            "role": role,
        },
    )
    if r.status_code == 409:
        r = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    r.raise_for_status()
    return r.json()["access_token"]


def main() -> None:
    client = TestClient(app)

    tutor = {"Authorization": f"Bearer {_register(client, TUTOR_EMAIL, 'tutor')}"}
    student = {
        "Authorization": f"Bearer {_register(client, STUDENT_EMAIL, 'student')}"
    }

    # ── Step 1: tutor creates a course with three topics ───────────
    r = client.post(
        "/v1/courses",
        json={"title": "Python basics", "description": "Start here"},
        headers=tutor,
    )
    course_id = r.json()["id"]
    print(f"1. POST /v1/courses                 → {r.status_code}  id={course_id}")

    topic_ids = []
    for order, title in enumerate(("Variables", "Loops", "Functions")):
        r = client.post(
            f"/v1/courses/{course_id}/topics",
            json={
                "title": title,
                "content": f"All about {title.lower()}",
                "description": title,
                "duration": 15,
                "order": order,
            },
            headers=tutor,
        )
        topic_ids.append(r.json()["id"])
    print(f"2. POST topics x{len(topic_ids)}                   → 201")

    # ── Step 2: student enrolls (twice, to show the conflict) ──────
    r = client.post(f"/v1/progress/enroll/{course_id}", headers=student)
    print(f"3. POST /v1/progress/enroll         → {r.status_code}")
    r = client.post(f"/v1/progress/enroll/{course_id}", headers=student)
    print(f"4. POST /v1/progress/enroll (again) → {r.status_code}  {r.json()}")

    # ── Step 3: complete topics and watch the percentage ───────────
    for topic_id in topic_ids:
        client.post(f"/v1/progress/complete-topic/{topic_id}", headers=student)
        report = client.get(
            f"/v1/progress/course/{course_id}", headers=student
        ).json()
        print(
            f"5. complete-topic                   → "
            f"{report['completed_topics']}/{report['total_topics']} "
            f"= {report['progress_percentage']}%  "
            f"completed={report['enrollment']['completed']}"
        )

    # ── Step 4: another tutor's edit is refused ─────────────────────
    other = {
        "Authorization": "Bearer "
        + _register(client, "other-tutor@example.com", "tutor")
    }
    r = client.patch(
        f"/v1/courses/{course_id}", json={"title": "Hijacked"}, headers=other
    )
    print(f"6. PATCH by non-owner               → {r.status_code}  {r.json()}")


if __name__ == "__main__":
    main()
