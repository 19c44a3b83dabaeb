import pytest
from fastapi.testclient import TestClient

from app.core.comparison import comparison_metrics
from app.core.criteria import Region, SearchCriteria
from app.core.recommendation import RecommendedCreator, ScoreBreakdown
from app.core.search_engine import SearchPage
from app.dependencies import get_recommendation_service, get_search_service
from app.main import app
from app.services.search_service import (
    ComparisonOutcome,
    CreatorNotFoundError,
    SearchExecutionError,
    SearchOutcome,
    TrendingOutcome,
)

from conftest import make_creator


class StubSearchService:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def search(self, query, preset_criteria=None, page=None, **kwargs):
        self.calls.append((query, preset_criteria, page))
        if self.fail:
            raise SearchExecutionError("Failed to search creators")
        creators = [make_creator(1, username="luisito", followers=1_500_000, engagement_rate=0.042)]
        criteria = preset_criteria or SearchCriteria(tags=["casino"])
        return SearchOutcome(
            page=SearchPage(creators=creators, total_count=1, page=page or 1, total_pages=1, has_more=False),
            criteria=criteria,
            summary="Found 1 creator.",
            processing_time_ms=3,
        )

    def interpret(self, query, previous=None):
        return SearchCriteria(tags=["casino"], regions=["MEXICO"])

    def get_creator_by_username(self, username, platform=None):
        if username.lower() == "luisito":
            return make_creator(1, username="luisito")
        return None

    def trending(self, region=None, limit=10):
        self.calls.append(("trending", region, limit))
        live = make_creator(2, username="envivo", is_live=True, current_viewers=900)
        return TrendingOutcome(creators=[live], insights="1 creator live.")

    def find_similar(self, username, limit=5):
        if username.lower() != "luisito":
            raise CreatorNotFoundError(f"Creator '@{username}' not found")
        return make_creator(1, username="luisito"), [make_creator(3, username="gemelo")][:limit]

    def compare(self, usernames):
        creators = [make_creator(i, username=name) for i, name in enumerate(usernames)]
        if "ghost" in usernames:
            raise CreatorNotFoundError("Creator '@ghost' not found")
        return ComparisonOutcome(rows=comparison_metrics(creators), recommendation="Pick either.")


class StubRecommendationService:
    def _result(self):
        return [
            RecommendedCreator(
                id="creator-1",
                platform="TWITCH",
                username="luisito",
                display_name="Luisito",
                followers=20_000,
                region="MEXICO",
                avatar_url=None,
                igaming_score=80.0,
                gambling_compatible=True,
                brand_safety_score=70.0,
                score=81.25,
                tier="micro",
                breakdown=ScoreBreakdown(vertical_fit=88, historical_performance=15),
            )
        ]

    def recommend(self, criteria, user_id=None):
        return self._result()[: criteria.total_count]

    def quick_recommendations(self, vertical, region=None, count=10):
        if vertical == "boom":
            raise RuntimeError("scoring exploded")
        return self._result()


@pytest.fixture()
def search_service():
    service = StubSearchService()
    app.dependency_overrides[get_search_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture()
def recommendation_service():
    service = StubRecommendationService()
    app.dependency_overrides[get_recommendation_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


def test_health():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_search_returns_page(search_service):
    response = TestClient(app).post("/search/", json={"query": "casino streamers", "page": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["total_count"] == 1
    assert data["criteria"]["tags"] == ["casino"]
    creator = data["creators"][0]
    assert creator["platform"] == "twitch"
    assert creator["followers_formatted"] == "1.5M"
    assert creator["profile_url"] == "https://twitch.tv/luisito"
    assert creator["engagement_rate_pct"] == pytest.approx(4.2)


def test_search_passes_preset_criteria(search_service):
    payload = {"query": "on kick", "preset_criteria": {"regions": ["MEXICO"], "limit": 20}}
    response = TestClient(app).post("/search/", json=payload)
    assert response.status_code == 200
    _, preset, _ = search_service.calls[0]
    assert preset.limit == 20
    assert [r.value for r in preset.regions] == ["MEXICO"]


def test_search_rejects_inverted_follower_range(search_service):
    payload = {"query": "casino", "preset_criteria": {"min_followers": 10_000, "max_followers": 10}}
    response = TestClient(app).post("/search/", json=payload)
    assert response.status_code == 400
    assert "min_followers" in response.json()["detail"]


def test_search_rejects_empty_query(search_service):
    response = TestClient(app).post("/search/", json={"query": ""})
    assert response.status_code == 422


def test_search_failure_is_500():
    app.dependency_overrides[get_search_service] = lambda: StubSearchService(fail=True)
    try:
        response = TestClient(app).post("/search/", json={"query": "casino"})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert response.json()["detail"] == "Search failed"


def test_interpret_endpoint(search_service):
    response = TestClient(app).post("/search/interpret", json={"query": "casino in mexico"})
    assert response.status_code == 200
    assert response.json()["criteria"]["regions"] == ["MEXICO"]


def test_username_lookup(search_service):
    client = TestClient(app)
    found = client.get("/search/username/luisito")
    missing = client.get("/search/username/nobody")
    assert found.status_code == 200
    assert found.json()["result"]["username"] == "luisito"
    assert missing.status_code == 404


def test_services_unavailable_without_database():
    app.dependency_overrides.clear()
    client = TestClient(app)
    assert client.post("/search/", json={"query": "casino"}).status_code == 503
    assert client.post("/recommendations/quick", json={"vertical": "igaming"}).status_code == 503


def test_recommendations(recommendation_service):
    response = TestClient(app).post("/recommendations/", json={"vertical": "igaming", "total_count": 5})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["results"][0]["score_breakdown"]["vertical_fit"] == 88
    assert data["results"][0]["tier"] == "micro"


def test_quick_recommendations_validation_and_errors(recommendation_service):
    client = TestClient(app)
    assert client.post("/recommendations/quick", json={"vertical": "igaming", "count": 0}).status_code == 422
    assert client.post("/recommendations/quick", json={"vertical": "boom"}).status_code == 500
    assert client.post("/recommendations/quick", json={"vertical": "igaming"}).status_code == 200


def test_trending_endpoint(search_service):
    client = TestClient(app)
    response = client.get("/search/trending", params={"region": "mexico", "limit": 3})
    assert response.status_code == 200
    data = response.json()
    assert data["creators"][0]["username"] == "envivo"
    assert data["insights"] == "1 creator live."
    assert search_service.calls[-1] == ("trending", Region.MEXICO, 3)

    assert client.get("/search/trending", params={"region": "atlantis"}).status_code == 400
    assert client.get("/search/trending", params={"limit": 0}).status_code == 422


def test_similar_endpoint(search_service):
    client = TestClient(app)
    found = client.get("/search/similar/luisito")
    assert found.status_code == 200
    assert found.json()["creator"]["username"] == "luisito"
    assert [item["username"] for item in found.json()["similar"]] == ["gemelo"]
    assert client.get("/search/similar/nobody").status_code == 404


def test_compare_endpoint(search_service):
    client = TestClient(app)
    response = client.post("/search/compare", json={"usernames": ["luisito", "envivo"]})
    assert response.status_code == 200
    data = response.json()
    assert [row["name"] for row in data["comparison"]] == ["Creator 0", "Creator 1"]
    assert data["recommendation"] == "Pick either."

    assert client.post("/search/compare", json={"usernames": ["luisito"]}).status_code == 422
    assert client.post("/search/compare", json={"usernames": ["luisito", "ghost"]}).status_code == 404
