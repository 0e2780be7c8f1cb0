"""
AI travel concierge - provider-agnostic travel advice and smart search.
"""
from typing import Dict, List, Optional, Any, Tuple
from abc import ABC, abstractmethod

from ..utils.logger import get_logger
from config.settings import gemini_config

APOLOGY_TEXT = "Désolé, je rencontre une difficulté technique."
DEFAULT_CATEGORY = "trending"

ADVICE_PROMPT = """Vous êtes le Concierge Elite de LOCADZ Algérie.
Requête : "{prompt}".
Contexte géo : {location}.
Instructions :
1. Donnez des recommandations ultra-locales (restaurants, musées, banques).
2. Utilisez Google Maps pour trouver des lieux RÉELS et ouverts.
3. Proposez des liens Google Maps si disponibles.
4. Soyez élégant, chaleureux et précis."""

SEARCH_PROMPT = 'Analyse : "{query}". Catégories : [{categories}]. ID le plus proche ? Réponse : un seul mot.'


class ConciergeProvider(ABC):
    """Abstract base class for concierge LLM providers."""

    @abstractmethod
    def generate_response(
        self, prompt: str, grounded: bool = False, location: Optional[Tuple[float, float]] = None
    ) -> Dict[str, Any]:
        """Return {"answer", "sources", "provider", "model"}; an "error" key on failure."""
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        pass


class MockConciergeProvider(ConciergeProvider):
    """Mock provider for tests and local development."""

    def __init__(self, model_name: str = "mock-model"):
        self.model_name = model_name
        self.logger = get_logger("mock_concierge")

    def generate_response(
        self, prompt: str, grounded: bool = False, location: Optional[Tuple[float, float]] = None
    ) -> Dict[str, Any]:
        self.logger.info("Generating mock response", prompt_length=len(prompt), grounded=grounded)
        if not grounded:
            # Smart search prompts expect a single category id
            answer = DEFAULT_CATEGORY
        else:
            answer = "Je vous recommande de flâner dans la Casbah puis de dîner face à la baie."
        return {"answer": answer, "sources": [], "provider": "mock", "model": self.model_name}

    def get_provider_name(self) -> str:
        return "mock"


def extract_sources(response: Any) -> List[Dict[str, str]]:
    """Web and maps grounding chunks of the first candidate as {title, uri}."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        target = getattr(chunk, "web", None) or getattr(chunk, "maps", None)
        uri = getattr(target, "uri", None)
        if uri:
            sources.append({"title": getattr(target, "title", None) or uri, "uri": uri})
    return sources


class GeminiConciergeProvider(ConciergeProvider):
    """
    Google Gemini provider.

    Grounded calls use the Google Search tool; with a location they also use
    Google Maps, anchored on the given coordinates.
    """

    def __init__(self, api_key: str, advice_model: str, search_model: str):
        from google import genai

        self.client = genai.Client(api_key=api_key)
        self.advice_model_name = advice_model
        self.search_model_name = search_model
        self.logger = get_logger("gemini_concierge")

    @staticmethod
    def grounding_config(location: Optional[Tuple[float, float]] = None):
        from google.genai import types

        tools = [types.Tool(google_search=types.GoogleSearch())]
        tool_config = None
        if location:
            tools.append(types.Tool(google_maps=types.GoogleMaps()))
            tool_config = types.ToolConfig(
                retrieval_config=types.RetrievalConfig(
                    lat_lng=types.LatLng(latitude=location[0], longitude=location[1])
                )
            )
        return types.GenerateContentConfig(tools=tools, tool_config=tool_config)

    def generate_response(
        self, prompt: str, grounded: bool = False, location: Optional[Tuple[float, float]] = None
    ) -> Dict[str, Any]:
        model_name = self.advice_model_name if grounded else self.search_model_name
        try:
            response = self.client.models.generate_content(
                model=model_name,
                contents=prompt,
                config=self.grounding_config(location) if grounded else None,
            )
            return {
                "answer": response.text or "",
                "sources": extract_sources(response) if grounded else [],
                "provider": "gemini",
                "model": model_name,
            }
        except Exception as e:
            self.logger.error("Gemini API error", error=str(e), model=model_name)
            return {"answer": "", "sources": [], "provider": "gemini", "model": model_name, "error": str(e)}

    def get_provider_name(self) -> str:
        return "gemini"


class ConciergeManager:
    """Chooses the configured provider and shapes concierge answers."""

    def __init__(self, provider: Optional[ConciergeProvider] = None):
        self.logger = get_logger("concierge")
        self.provider = provider or self._initialize_provider()

    def _initialize_provider(self) -> ConciergeProvider:
        provider_name = gemini_config.provider
        try:
            if provider_name == "gemini":
                if not gemini_config.api_key:
                    raise ValueError("GEMINI_API_KEY not found in environment")
                provider = GeminiConciergeProvider(
                    gemini_config.api_key, gemini_config.advice_model, gemini_config.search_model
                )
            else:
                provider = MockConciergeProvider()
            self.logger.info(f"Initialized {provider.get_provider_name()} concierge provider")
            return provider
        except Exception as e:
            self.logger.warning(f"Failed to initialize {provider_name}, falling back to mock", error=str(e))
            return MockConciergeProvider("fallback-model")

    def get_travel_advice(self, prompt: str, location: Optional[Tuple[float, float]] = None) -> Dict[str, Any]:
        """
        Ask the concierge for local recommendations.

        Args:
            prompt: The traveler's request
            location: Optional (lat, lng) of the listing being viewed

        Returns:
            {"text": ..., "sources": [{"title", "uri"}]}; the apology text and no
            sources when the provider fails
        """
        geo = f"Lat {location[0]}, Lng {location[1]}" if location else "Global Algérie"
        result = self.provider.generate_response(
            ADVICE_PROMPT.format(prompt=prompt, location=geo), grounded=True, location=location
        )
        if result.get("error") or not result.get("answer"):
            return {"text": APOLOGY_TEXT, "sources": []}

        self.logger.info(
            "Travel advice generated",
            provider=self.provider.get_provider_name(),
            sources=len(result.get("sources") or []),
        )
        return {"text": result["answer"], "sources": result.get("sources") or []}

    def parse_smart_search(self, query: str, categories: List[str]) -> str:
        """Closest category id for a free-text search, `trending` when unsure."""
        if not query.strip() or not categories:
            return DEFAULT_CATEGORY
        result = self.provider.generate_response(
            SEARCH_PROMPT.format(query=query, categories=", ".join(categories)), grounded=False
        )
        if result.get("error"):
            return DEFAULT_CATEGORY

        words = (result.get("answer") or "").strip().lower().split()
        candidate = words[0].strip(".,;:!?\"'`") if words else ""
        known = {c.lower() for c in categories}
        return candidate if candidate in known else DEFAULT_CATEGORY


# Global instance
_concierge_manager = None


def get_concierge_manager() -> ConciergeManager:
    """Get the global concierge manager instance."""
    global _concierge_manager
    if _concierge_manager is None:
        _concierge_manager = ConciergeManager()
    return _concierge_manager
