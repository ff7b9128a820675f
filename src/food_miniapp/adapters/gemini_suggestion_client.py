"""Google Gemini client for dish suggestions."""

from dataclasses import dataclass

from google import genai
from google.genai import types

from food_miniapp.domain.errors import ProviderCallFailure
from food_miniapp.services.suggestions import SuggestionClient


@dataclass
class GeminiSuggestionClient(SuggestionClient):
    """Suggestion client backed by the Gemini generate_content API."""

    client: genai.Client
    model: str
    temperature: float = 0.7

    @classmethod
    def create(
        cls, api_key: str, model: str, temperature: float = 0.7
    ) -> "GeminiSuggestionClient":
        """Create a Gemini suggestion client."""
        return cls(
            client=genai.Client(api_key=api_key),
            model=model,
            temperature=temperature,
        )

    async def generate(
        self,
        *,
        prompt: str,
        safety_settings: list[tuple[str, str]],
    ) -> str:
        """Call Gemini in JSON mode and return the response text."""
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            temperature=self.temperature,
            safety_settings=[
                types.SafetySetting(
                    category=types.HarmCategory(category),
                    threshold=types.HarmBlockThreshold(threshold),
                )
                for category, threshold in safety_settings
            ],
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
            config=config,
        )
        output_text = response.text
        if not output_text:
            raise ProviderCallFailure("Gemini returned an empty response")
        return output_text
