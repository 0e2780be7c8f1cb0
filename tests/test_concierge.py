"""
Unit tests for the travel concierge.
"""
import pytest
from unittest.mock import Mock, patch
from types import SimpleNamespace

from src.llm.concierge import (
    ConciergeManager, MockConciergeProvider, GeminiConciergeProvider, APOLOGY_TEXT, DEFAULT_CATEGORY,
    extract_sources
)

pytestmark = pytest.mark.unit

CATEGORIES = ["trending", "beach", "mountain", "desert", "city"]


def _provider(answer="", error=None, sources=None):
    provider = Mock()
    provider.get_provider_name.return_value = "stub"
    result = {"answer": answer, "sources": sources or [], "provider": "stub", "model": "stub-1"}
    if error:
        result["error"] = error
    provider.generate_response.return_value = result
    return provider


class TestTravelAdvice:
    def test_mock_provider_answers(self):
        advice = ConciergeManager(MockConciergeProvider()).get_travel_advice("Où dîner à Alger ?")
        assert advice["text"]
        assert advice["sources"] == []

    def test_location_goes_into_prompt(self):
        provider = _provider("Essayez le port de Sidi Fredj.")
        ConciergeManager(provider).get_travel_advice("Restaurants ?", location=(36.76, 2.85))

        prompt = provider.generate_response.call_args[0][0]
        assert "Lat 36.76, Lng 2.85" in prompt
        assert provider.generate_response.call_args[1]["grounded"] is True
        assert provider.generate_response.call_args[1]["location"] == (36.76, 2.85)

    def test_no_location(self):
        provider = _provider("Bienvenue.")
        ConciergeManager(provider).get_travel_advice("Que visiter ?")
        assert "Global Algérie" in provider.generate_response.call_args[0][0]

    def test_sources_are_returned(self):
        sources = [{"title": "Musée du Bardo", "uri": "https://maps.google.com/?cid=1"}]
        advice = ConciergeManager(_provider("Le Bardo.", sources=sources)).get_travel_advice("Musées ?")
        assert advice == {"text": "Le Bardo.", "sources": sources}

    @pytest.mark.parametrize("answer,error", [("", None), ("partial", "quota exceeded")])
    def test_failure_yields_apology(self, answer, error):
        advice = ConciergeManager(_provider(answer, error=error)).get_travel_advice("Plage ?")
        assert advice == {"text": APOLOGY_TEXT, "sources": []}


class TestSmartSearch:
    @pytest.mark.parametrize("answer,expected", [
        ("beach", "beach"),
        ("  Desert.\n", "desert"),
        ("mountain chalets are best", "mountain"),
        ("castle", DEFAULT_CATEGORY),
        ("", DEFAULT_CATEGORY),
    ])
    def test_answer_is_mapped_to_category(self, answer, expected):
        manager = ConciergeManager(_provider(answer))
        assert manager.parse_smart_search("une villa pieds dans l'eau", CATEGORIES) == expected

    def test_provider_error(self):
        manager = ConciergeManager(_provider("beach", error="timeout"))
        assert manager.parse_smart_search("plage", CATEGORIES) == DEFAULT_CATEGORY

    def test_blank_query_skips_provider(self):
        provider = _provider("beach")
        assert ConciergeManager(provider).parse_smart_search("   ", CATEGORIES) == DEFAULT_CATEGORY
        provider.generate_response.assert_not_called()

    def test_mock_provider_defaults_to_trending(self):
        assert ConciergeManager(MockConciergeProvider()).parse_smart_search("plage", CATEGORIES) == "trending"


class TestSources:
    def test_extract_web_and_maps_chunks(self):
        response = SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=[
            SimpleNamespace(web=SimpleNamespace(uri="https://a.dz", title="A"), maps=None),
            SimpleNamespace(web=None, maps=SimpleNamespace(uri="https://maps/b", title=None)),
            SimpleNamespace(web=None, maps=None),
        ]))])

        assert extract_sources(response) == [
            {"title": "A", "uri": "https://a.dz"},
            {"title": "https://maps/b", "uri": "https://maps/b"},
        ]

    def test_no_candidates(self):
        assert extract_sources(SimpleNamespace(candidates=[])) == []
        assert extract_sources(object()) == []


class TestGeminiProvider:
    @pytest.fixture
    def client(self):
        with patch("google.genai.Client") as mock_client:
            yield mock_client.return_value

    def _provider(self):
        return GeminiConciergeProvider("key", "gemini-2.5-flash", "gemini-2.5-flash-lite")

    def test_grounded_call_with_location_uses_search_and_maps(self, client):
        client.models.generate_content.return_value = SimpleNamespace(text="Le Bardo.", candidates=[])

        result = self._provider().generate_response("Musées ?", grounded=True, location=(36.76, 3.05))

        assert result["answer"] == "Le Bardo."
        kwargs = client.models.generate_content.call_args[1]
        assert kwargs["model"] == "gemini-2.5-flash"
        tools = kwargs["config"].tools
        assert tools[0].google_search is not None
        assert tools[1].google_maps is not None
        lat_lng = kwargs["config"].tool_config.retrieval_config.lat_lng
        assert (lat_lng.latitude, lat_lng.longitude) == (36.76, 3.05)

    def test_grounded_call_without_location_searches_only(self, client):
        client.models.generate_content.return_value = SimpleNamespace(text="Bienvenue.", candidates=[])

        self._provider().generate_response("Que visiter ?", grounded=True)

        config = client.models.generate_content.call_args[1]["config"]
        assert len(config.tools) == 1
        assert config.tool_config is None

    def test_smart_search_call_is_ungrounded(self, client):
        client.models.generate_content.return_value = SimpleNamespace(text="beach", candidates=[])

        result = self._provider().generate_response("plage")

        kwargs = client.models.generate_content.call_args[1]
        assert kwargs["model"] == "gemini-2.5-flash-lite"
        assert kwargs["config"] is None
        assert result["sources"] == []

    def test_api_error_is_reported(self, client):
        client.models.generate_content.side_effect = Exception("400 INVALID_ARGUMENT")

        result = self._provider().generate_response("Plage ?", grounded=True)

        assert result["answer"] == ""
        assert "INVALID_ARGUMENT" in result["error"]
