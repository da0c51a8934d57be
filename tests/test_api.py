"""
End-to-end tests for the HTTP API.

Each test gets a fresh app (and repository) from the ``client`` fixture.
"""

import pytest
from fastapi.testclient import TestClient


def upload(client, headers, content=b"Hello world", filename="hello.txt", mimetype="text/plain"):
    return client.post(
        "/api/documents/upload",
        files={"file": (filename, content, mimetype)},
        headers=headers,
    )


def generate_summary(client, headers, document_id, **overrides):
    body = {
        "documentId": document_id,
        "format": "concise",
        "readability": "simple",
        "extractKeyTerms": False,
    }
    body.update(overrides)
    return client.post("/api/summaries/generate", json=body, headers=headers)


@pytest.fixture
def summary(client, auth_headers):
    document = upload(client, auth_headers).json()
    return generate_summary(client, auth_headers, document["id"]).json()


# =============================================================================
# Authentication
# =============================================================================

class TestAuthentication:

    def test_missing_token(self, client: TestClient):
        response = client.get("/api/documents")
        assert response.status_code == 401

    def test_invalid_token(self, client: TestClient):
        response = client.get("/api/documents", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_user_profile_created_on_first_request(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/user", headers=auth_headers)
        assert response.status_code == 200

        profile = response.json()
        assert profile["username"] == "ada"
        assert profile["email"] == "ada@example.com"
        assert profile["name"] == "Ada Lovelace"
        assert profile["studyStreak"] == 0

        again = client.get("/api/user", headers=auth_headers).json()
        assert again["id"] == profile["id"]

    def test_other_users_records_are_not_found(self, client, auth_headers, other_auth_headers):
        document = upload(client, auth_headers).json()

        response = client.get(f"/api/documents/{document['id']}", headers=other_auth_headers)
        assert response.status_code == 404
        assert client.get("/api/documents", headers=other_auth_headers).json() == []


# =============================================================================
# Documents
# =============================================================================

class TestDocuments:

    def test_upload_plain_text(self, client: TestClient, auth_headers: dict):
        response = upload(client, auth_headers)
        assert response.status_code == 201

        info = response.json()
        assert info["title"] == "hello"
        assert info["fileName"] == "hello.txt"
        assert info["fileType"] == "text/plain"
        assert info["fileSize"] == 11
        assert "createdAt" in info
        assert "content" not in info

        document = client.get(f"/api/documents/{info['id']}", headers=auth_headers).json()
        assert document["content"] == "Hello world"
        assert document["fileSize"] == 11

    def test_upload_pdf(self, client: TestClient, auth_headers: dict, text_pdf: bytes):
        response = upload(client, auth_headers, text_pdf, "notes.pdf", "application/pdf")
        assert response.status_code == 201
        assert response.json()["title"] == "notes"

        document = client.get(f"/api/documents/{response.json()['id']}", headers=auth_headers).json()
        assert "Photosynthesis converts light into chemical energy" in document["content"]

    def test_upload_unsupported_type(self, client: TestClient, auth_headers: dict):
        response = upload(client, auth_headers, b"<p>hi</p>", "page.html", "text/html")
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_upload_without_file(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/documents/upload", headers=auth_headers)
        assert response.status_code == 400

    def test_upload_too_large(self, app, auth_headers: dict):
        app.state.file_processor.max_size = 5
        with TestClient(app) as client:
            response = upload(client, auth_headers)
        assert response.status_code == 400

    def test_list_documents(self, client: TestClient, auth_headers: dict):
        upload(client, auth_headers, filename="a.txt")
        upload(client, auth_headers, filename="b.txt")

        documents = client.get("/api/documents", headers=auth_headers).json()

        assert sorted(d["fileName"] for d in documents) == ["a.txt", "b.txt"]

    def test_missing_document(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/documents/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Document not found"

    def test_non_integer_id(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/documents/abc", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid document ID"

    def test_delete_document(self, client: TestClient, auth_headers: dict):
        document = upload(client, auth_headers).json()

        response = client.delete(f"/api/documents/{document['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert client.get(f"/api/documents/{document['id']}", headers=auth_headers).status_code == 404
        assert client.delete(f"/api/documents/{document['id']}", headers=auth_headers).status_code == 404


# =============================================================================
# Summaries
# =============================================================================

class TestSummaries:

    def test_concise_summary(self, client: TestClient, auth_headers: dict):
        document = upload(client, auth_headers).json()

        response = generate_summary(client, auth_headers, document["id"])
        assert response.status_code == 201

        summary = response.json()
        assert summary["readTime"] == 1
        assert summary["format"] == "concise"
        assert summary["documentId"] == document["id"]
        assert summary["keyTerms"] == []

    def test_key_terms_requested(self, client: TestClient, auth_headers: dict):
        document = upload(client, auth_headers).json()
        summary = generate_summary(client, auth_headers, document["id"], extractKeyTerms=True).json()
        assert len(summary["keyTerms"]) == 3

    def test_missing_document(self, client: TestClient, auth_headers: dict):
        response = generate_summary(client, auth_headers, 999)
        assert response.status_code == 404

    def test_invalid_format(self, client: TestClient, auth_headers: dict):
        document = upload(client, auth_headers).json()
        response = generate_summary(client, auth_headers, document["id"], format="haiku")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request"

    def test_delete_summary_keeps_flashcards(self, client, auth_headers, summary):
        client.post("/api/flashcards/generate", json={"summaryId": summary["id"]}, headers=auth_headers)

        response = client.delete(f"/api/summaries/{summary['id']}", headers=auth_headers)
        assert response.json() == {"success": True}

        assert client.get(f"/api/summaries/{summary['id']}", headers=auth_headers).status_code == 404
        assert len(client.get("/api/flashcards", headers=auth_headers).json()) == 5

    def test_list_summaries(self, client, auth_headers, summary):
        summaries = client.get("/api/summaries", headers=auth_headers).json()
        assert [s["id"] for s in summaries] == [summary["id"]]


# =============================================================================
# Quizzes
# =============================================================================

class TestQuizzes:

    @pytest.mark.parametrize("difficulty,expected", [("easy", 5), ("medium", 8), ("hard", 10)])
    def test_quiz_size(self, client, auth_headers, summary, difficulty, expected):
        response = client.post(
            "/api/quizzes/generate",
            json={"summaryId": summary["id"], "difficulty": difficulty},
            headers=auth_headers,
        )
        assert response.status_code == 201

        quiz = response.json()
        assert quiz["difficulty"] == difficulty
        assert len(quiz["questions"]) == expected
        for question in quiz["questions"]:
            assert question["correctAnswer"] in [o["id"] for o in question["options"]]

    def test_missing_summary(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/quizzes/generate",
            json={"summaryId": 999, "difficulty": "easy"},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Summary not found"

    def test_get_and_delete_quiz(self, client, auth_headers, summary):
        quiz = client.post(
            "/api/quizzes/generate",
            json={"summaryId": summary["id"], "difficulty": "easy"},
            headers=auth_headers,
        ).json()

        assert client.get(f"/api/quizzes/{quiz['id']}", headers=auth_headers).json()["id"] == quiz["id"]
        assert len(client.get("/api/quizzes", headers=auth_headers).json()) == 1

        assert client.delete(f"/api/quizzes/{quiz['id']}", headers=auth_headers).json() == {"success": True}
        assert client.get(f"/api/quizzes/{quiz['id']}", headers=auth_headers).status_code == 404

    def test_quiz_results(self, client, auth_headers, summary):
        quiz = client.post(
            "/api/quizzes/generate",
            json={"summaryId": summary["id"], "difficulty": "easy"},
            headers=auth_headers,
        ).json()

        response = client.post(
            "/api/quiz-results",
            json={"quizId": quiz["id"], "score": 80, "totalQuestions": 5},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["score"] == 80

        results = client.get("/api/quiz-results", headers=auth_headers).json()
        assert [r["quizId"] for r in results] == [quiz["id"]]

    def test_quiz_result_validation(self, client, auth_headers):
        response = client.post(
            "/api/quiz-results",
            json={"quizId": 1, "score": 120, "totalQuestions": 5},
            headers=auth_headers,
        )
        assert response.status_code == 400

        response = client.post(
            "/api/quiz-results",
            json={"quizId": 1, "score": "80", "totalQuestions": True},
            headers=auth_headers,
        )
        assert response.status_code == 400

        response = client.post(
            "/api/quiz-results",
            json={"quizId": 999, "score": 50, "totalQuestions": 5},
            headers=auth_headers,
        )
        assert response.status_code == 404


# =============================================================================
# Flashcards
# =============================================================================

class TestFlashcards:

    def test_upload_summarize_generate_flashcards(self, client: TestClient, auth_headers: dict):
        document = upload(client, auth_headers).json()
        assert document["fileSize"] == 11

        summary = generate_summary(client, auth_headers, document["id"]).json()
        assert summary["readTime"] == 1

        response = client.post("/api/flashcards/generate", json={"summaryId": summary["id"]}, headers=auth_headers)
        assert response.status_code == 201

        cards = response.json()
        assert len(cards) == 5
        for card in cards:
            assert card["interval"] == 1
            assert card["lastStudied"] is None
            assert card["summaryId"] == summary["id"]

    def test_update_interval(self, client, auth_headers, summary):
        cards = client.post("/api/flashcards/generate", json={"summaryId": summary["id"]}, headers=auth_headers).json()

        response = client.patch(f"/api/flashcards/{cards[0]['id']}/interval", json={"interval": 2}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["interval"] == 2
        assert response.json()["lastStudied"] is not None

    def test_lower_interval_is_accepted(self, client, auth_headers, summary):
        """Intervals are replaced as given; there is no monotonicity check."""
        cards = client.post("/api/flashcards/generate", json={"summaryId": summary["id"]}, headers=auth_headers).json()
        url = f"/api/flashcards/{cards[0]['id']}/interval"

        client.patch(url, json={"interval": 6}, headers=auth_headers)
        response = client.patch(url, json={"interval": 2}, headers=auth_headers)

        assert response.json()["interval"] == 2

    @pytest.mark.parametrize("interval", [0, -3, 1.5, "two", "3", True])
    def test_invalid_interval(self, client, auth_headers, summary, interval):
        cards = client.post("/api/flashcards/generate", json={"summaryId": summary["id"]}, headers=auth_headers).json()

        response = client.patch(
            f"/api/flashcards/{cards[0]['id']}/interval", json={"interval": interval}, headers=auth_headers
        )

        assert response.status_code == 400
        card = client.get(f"/api/flashcards/{cards[0]['id']}", headers=auth_headers).json()
        assert card["interval"] == 1

    def test_update_missing_flashcard(self, client: TestClient, auth_headers: dict):
        response = client.patch("/api/flashcards/999/interval", json={"interval": 2}, headers=auth_headers)
        assert response.status_code == 404

    def test_filter_by_summary(self, client, auth_headers, summary):
        client.post("/api/flashcards/generate", json={"summaryId": summary["id"]}, headers=auth_headers)
        client.post("/api/flashcards", json={"front": "Q", "back": "A"}, headers=auth_headers)

        everything = client.get("/api/flashcards", headers=auth_headers).json()
        filtered = client.get(f"/api/flashcards?summaryId={summary['id']}", headers=auth_headers).json()

        assert len(everything) == 6
        assert len(filtered) == 5

    def test_manual_create_and_delete(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/flashcards", json={"front": "Capital of France?", "back": "Paris"}, headers=auth_headers)
        assert response.status_code == 201

        card = response.json()
        assert card["summaryId"] is None
        assert card["interval"] == 1

        assert client.delete(f"/api/flashcards/{card['id']}", headers=auth_headers).json() == {"success": True}
        assert client.delete(f"/api/flashcards/{card['id']}", headers=auth_headers).status_code == 404

    def test_manual_create_requires_text(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/flashcards", json={"front": "", "back": "Paris"}, headers=auth_headers)
        assert response.status_code == 400


# =============================================================================
# Study Sessions and Statistics
# =============================================================================

class TestStudyActivity:

    def test_sessions_increment_streak(self, client: TestClient, auth_headers: dict):
        for _ in range(2):
            response = client.post(
                "/api/study-sessions",
                json={"duration": 120, "activityType": "flashcard", "activityId": 1},
                headers=auth_headers,
            )
            assert response.status_code == 201
            assert response.json()["activityType"] == "flashcard"

        assert client.get("/api/user", headers=auth_headers).json()["studyStreak"] == 2

    @pytest.mark.parametrize("body", [
        {"duration": 0, "activityType": "quiz", "activityId": 1},
        {"duration": 60, "activityType": "reading", "activityId": 1},
        {"duration": 60, "activityType": "quiz", "activityId": 0},
        {"duration": 60, "activityType": "quiz"},
        {"duration": True, "activityType": "quiz", "activityId": 1},
        {"duration": "60", "activityType": "quiz", "activityId": 1},
        {"duration": 60, "activityType": "quiz", "activityId": "1"},
    ])
    def test_session_validation(self, client, auth_headers, body):
        response = client.post("/api/study-sessions", json=body, headers=auth_headers)
        assert response.status_code == 400

    def test_stats(self, client, auth_headers, summary):
        client.post(
            "/api/study-sessions",
            json={"duration": 60, "activityType": "quiz", "activityId": 1},
            headers=auth_headers,
        )

        stats = client.get("/api/stats", headers=auth_headers).json()

        assert stats == {
            "summariesThisMonth": 1,
            "quizzesCompleted": 1,
            "flashcardsPracticed": 0,
            "studyStreak": 1,
        }

    def test_stats_are_per_user(self, client, auth_headers, other_auth_headers, summary):
        stats = client.get("/api/stats", headers=other_auth_headers).json()
        assert stats["summariesThisMonth"] == 0


# =============================================================================
# Health and Middleware
# =============================================================================

class TestHealth:

    def test_health(self, client: TestClient, auth_headers: dict):
        upload(client, auth_headers)

        response = client.get("/health")
        assert response.status_code == 200

        health = response.json()
        assert health["status"] == "healthy"
        assert health["statistics"]["documents"] == 1
        assert health["statistics"]["users"] == 1
        assert health["dependencies"]["upload_dir_writable"] is True
        assert health["dependencies"]["generator"] == "PlaceholderContentGenerator"

    def test_request_id_header(self, client: TestClient):
        response = client.get("/health")
        assert response.headers.get("X-Request-ID")

    def test_apps_do_not_share_records(self, test_settings, make_headers):
        from studyhub.main import create_app

        headers = make_headers("uid-isolated")
        with TestClient(create_app(app_settings=test_settings)) as first:
            upload(first, headers)
        with TestClient(create_app(app_settings=test_settings)) as second:
            assert second.get("/api/documents", headers=headers).json() == []


# =============================================================================
# Per-App Settings
# =============================================================================

class TestAppSettings:

    def test_tokens_verified_with_app_secret(self, test_settings):
        from studyhub.auth import create_access_token
        from studyhub.main import create_app

        cfg = test_settings.model_copy(update={"secret_key": "per-app-secret"})
        own = {"Authorization": f"Bearer {create_access_token({'sub': 'uid-own'}, secret_key='per-app-secret')}"}
        foreign = {"Authorization": f"Bearer {create_access_token({'sub': 'uid-own'})}"}

        with TestClient(create_app(app_settings=cfg)) as client:
            assert client.get("/api/user", headers=own).status_code == 200
            assert client.get("/api/user", headers=foreign).status_code == 401

    def test_rate_limit_follows_app_settings(self, test_settings, auth_headers):
        from studyhub.main import create_app
        from studyhub.rate_limit import limiter

        limiter.reset()
        live = test_settings.model_copy(update={"testing": False})
        with TestClient(create_app(app_settings=live)) as client:
            assert limiter.enabled is True
            statuses = [upload(client, auth_headers).status_code for _ in range(11)]

        assert statuses[:10] == [201] * 10
        assert statuses[10] == 429

        create_app(app_settings=test_settings)
        assert limiter.enabled is False
