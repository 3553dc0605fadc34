"""
Integration tests for the FastAPI exam analysis server.

Uses httpx.AsyncClient + ASGITransport for in-process HTTP round-trips.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from exam_analysis.api.app import create_app
from exam_analysis.api.config import ApiSettings

SMALL_SETTINGS = ApiSettings(
    max_students=100,
    max_questions=20,
    max_variants=4,
    max_pairs=1000,
)

KEY_TEXT = {"Q1": "alpha", "Q2": "beta", "Q3": "gamma", "Q4": "delta"}
VARIANT_OPTIONS = {
    "V1": ["alpha", "beta", "gamma", "delta"],
    "V2": ["delta", "gamma", "beta", "alpha"],
}
VARIANT_KEY_LETTERS = {"V1": "ABCD", "V2": "DCBA"}
SHEETS = {
    "S1": ("V1", "ABCD"),
    "S2": ("V1", "ABCA"),
    "S3": ("V1", "BBAA"),
    "S4": ("V2", "DCBA"),
    "S5": ("V2", "DCAA"),
    "S6": ("V2", "ABCD"),
}


def _make_client() -> AsyncClient:
    app = create_app(settings=SMALL_SETTINGS)
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://testserver")


def _student(sid: str, variant: str, letters: str) -> dict[str, object]:
    key = VARIANT_KEY_LETTERS[variant]
    correct = [letter == key[i] for i, letter in enumerate(letters)]
    return {
        "student_id": sid,
        "display_student_id": sid,
        "variant_code": variant,
        "question_responses": [
            {
                "question_id": f"Q{i + 1}",
                "student_answer": letter,
                "is_correct": correct[i],
                "points": 1.0 if correct[i] else 0.0,
            }
            for i, letter in enumerate(letters)
        ],
        "total_score": sum(correct),
        "max_possible_score": 4,
        "completed_at": "2024-05-01T12:00:00Z",
    }


def _analysis_payload(min_sample_size: int = 6) -> dict[str, object]:
    return {
        "exam_variants": [
            {
                "variant_code": code,
                "exam_id": "exam-1",
                "exam_title": "Greek letters",
                "questions": [
                    {"id": qid, "options": options, "correct_answer": text}
                    for qid, text in KEY_TEXT.items()
                ],
            }
            for code, options in VARIANT_OPTIONS.items()
        ],
        "student_responses": [
            _student(sid, variant, letters)
            for sid, (variant, letters) in SHEETS.items()
        ],
        "config": {"min_sample_size": min_sample_size},
    }


def _response_similarity() -> dict[str, dict[str, float]]:
    keys = [f"{sid} ({variant})" for sid, (variant, _) in SHEETS.items()]
    matrix = {a: {b: (1.0 if a == b else 0.3) for b in keys} for a in keys}
    matrix["S1 (V1)"]["S6 (V2)"] = 0.95
    matrix["S6 (V2)"]["S1 (V1)"] = 0.95
    return matrix


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self) -> None:
        async with _make_client() as client:
            resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert isinstance(data["version"], str)

    @pytest.mark.asyncio
    async def test_request_id_echoed(self) -> None:
        """A caller-supplied request id is returned unchanged."""
        async with _make_client() as client:
            resp = await client.get(
                "/api/v1/health", headers={"X-Request-ID": "abc123"}
            )
        assert resp.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self) -> None:
        async with _make_client() as client:
            resp = await client.get("/api/v1/health")
        assert resp.headers["X-Request-ID"]


class TestAnalysisEndpoint:
    @pytest.mark.asyncio
    async def test_analysis(self) -> None:
        async with _make_client() as client:
            resp = await client.post("/api/v1/analysis", json=_analysis_payload())
        assert resp.status_code == 200
        data = resp.json()
        assert data["exam_title"] == "Greek letters"
        assert [q["question_id"] for q in data["question_results"]] == [
            "Q1",
            "Q2",
            "Q3",
            "Q4",
        ]
        for q in data["question_results"]:
            assert 0.0 <= q["difficulty_index"] <= 1.0
            assert q["total_responses"] == 6
        assert data["metadata"]["sample_size"] == 6
        assert len(data["variant_results"]) == 2

    @pytest.mark.asyncio
    async def test_insufficient_sample(self) -> None:
        async with _make_client() as client:
            resp = await client.post(
                "/api/v1/analysis",
                json=_analysis_payload(min_sample_size=10),
                headers={"X-Request-ID": "req-1"},
            )
        assert resp.status_code == 422
        data = resp.json()
        assert data["code"] == "INSUFFICIENT_SAMPLE"
        assert data["request_id"] == "req-1"

    @pytest.mark.asyncio
    async def test_empty_question_set(self) -> None:
        payload = _analysis_payload()
        payload["exam_variants"] = [{"variant_code": "V1"}]
        async with _make_client() as client:
            resp = await client.post("/api/v1/analysis", json=payload)
        assert resp.status_code == 422
        assert resp.json()["code"] == "EMPTY_QUESTION_SET"

    @pytest.mark.asyncio
    async def test_duplicate_variant_code(self) -> None:
        payload = _analysis_payload()
        variant = {
            "variant_code": "V1",
            "questions": [{"id": "Q1", "options": ["a", "b"], "correct_answer": "a"}],
        }
        payload["exam_variants"] = [variant, dict(variant)]
        async with _make_client() as client:
            resp = await client.post("/api/v1/analysis", json=payload)
        assert resp.status_code == 422
        data = resp.json()
        assert data["code"] == "DUPLICATE_VARIANT"
        assert "V1" in data["message"]

    @pytest.mark.asyncio
    async def test_too_many_variants(self) -> None:
        payload = _analysis_payload()
        payload["exam_variants"] = [
            {"variant_code": f"V{i}", "questions": [{"id": "Q1", "options": ["a", "b"]}]}
            for i in range(5)
        ]
        async with _make_client() as client:
            resp = await client.post("/api/v1/analysis", json=payload)
        assert resp.status_code == 422
        data = resp.json()
        assert data["code"] == "DATA_SIZE_EXCEEDED"
        assert "n_variants" in data["message"]

    @pytest.mark.asyncio
    async def test_malformed_body(self) -> None:
        """Bodies that fail schema validation are rejected."""
        async with _make_client() as client:
            resp = await client.post(
                "/api/v1/analysis", json={"exam_variants": "nope"}
            )
        assert resp.status_code == 422


class TestIntegrityEndpoint:
    @pytest.mark.asyncio
    async def test_analysis_then_flagging(self) -> None:
        """The analysis result feeds the integrity endpoint unchanged."""
        async with _make_client() as client:
            analysis = await client.post(
                "/api/v1/analysis", json=_analysis_payload()
            )
            assert analysis.status_code == 200
            resp = await client.post(
                "/api/v1/integrity",
                json={
                    "variant_similarity": {
                        "V1": {"V1": 1.0, "V2": 0.2},
                        "V2": {"V2": 1.0},
                    },
                    "response_similarity": _response_similarity(),
                    "exam_result": analysis.json(),
                },
            )
        assert resp.status_code == 200
        data = resp.json()
        flagged = data["flagged"]
        assert len(flagged) == 15
        probabilities = [f["probability"] for f in flagged]
        assert probabilities == sorted(probabilities, reverse=True)
        assert all(0.0 <= p <= 0.999 for p in probabilities)
        assert data["summary"]["total_flagged"] == 15
        assert data["summary"]["unique_students_involved"] == 6

        pair = next(
            f
            for f in flagged
            if (f["student1"], f["student2"]) == ("S1 (V1)", "S6 (V2)")
        )
        assert pair["student2_cross_grade"] == 100.0
        assert pair["student2_grade_change"] == 100.0

    @pytest.mark.asyncio
    async def test_min_probability_filter(self) -> None:
        async with _make_client() as client:
            analysis = await client.post(
                "/api/v1/analysis", json=_analysis_payload()
            )
            resp = await client.post(
                "/api/v1/integrity",
                json={
                    "variant_similarity": {"V1": {"V1": 1.0, "V2": 0.2}},
                    "response_similarity": _response_similarity(),
                    "exam_result": analysis.json(),
                    "min_probability": 0.999,
                },
            )
        assert resp.status_code == 200
        data = resp.json()
        assert all(f["probability"] >= 0.999 for f in data["flagged"])
        assert data["summary"]["total_flagged"] == len(data["flagged"])

    @pytest.mark.asyncio
    async def test_too_many_pairs(self) -> None:
        keys = [f"S{i}" for i in range(50)]
        matrix = {a: {b: 0.1 for b in keys} for a in keys}
        async with _make_client() as client:
            analysis = await client.post(
                "/api/v1/analysis", json=_analysis_payload()
            )
            resp = await client.post(
                "/api/v1/integrity",
                json={
                    "variant_similarity": {},
                    "response_similarity": matrix,
                    "exam_result": analysis.json(),
                },
            )
        assert resp.status_code == 422
        assert resp.json()["code"] == "DATA_SIZE_EXCEEDED"
