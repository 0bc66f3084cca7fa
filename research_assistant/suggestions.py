import logging
from typing import List, Optional
from langchain_core.prompts import PromptTemplate
from research_assistant.config import ModelConfig
from research_assistant.llm_client import ModelGateway
from research_assistant.normalizer import extract_text, parse_json_payload
from research_assistant.schemas import SUGGESTIONS_SCHEMA

SUGGESTIONS_PROMPT = PromptTemplate.from_template(
    "You are an AI research assistant. Based on the user's search for \"{query}\", generate {count} new, "
    "high-quality related research queries.\n\n"
    "**Rules:**\n"
    "- Output ONLY a JSON array of strings.\n"
    "- Example: [\"Applications of {query}\", \"Future challenges in {query}\", "
    "\"Comparative analysis of {query} methods\"]"
)


class SuggestionGenerator:
    """
    Suggests follow-up research queries. Suggestions are decorative, so failures
    never reach the caller.
    """

    def __init__(self, gateway: ModelGateway, config: Optional[ModelConfig] = None):
        self.gateway = gateway
        self.config = config or ModelConfig()

    async def generate_suggestions(self, query: str) -> List[str]:
        """
        Generates related research queries.

        Returns:
            List[str]: Up to `suggestion_count` queries, or an empty list on any failure.
        """
        try:
            prompt = SUGGESTIONS_PROMPT.format(query=query, count=self.config.suggestion_count)
            envelope = await self.gateway.invoke(prompt, self.config.fast_model, response_schema=SUGGESTIONS_SCHEMA)
            payload = parse_json_payload(extract_text(envelope))
        except Exception as e:
            logging.error(f"Error generating research suggestions: {e}")
            return []

        if not isinstance(payload, list):
            logging.error(f"Error generating research suggestions: expected a JSON array, got {type(payload).__name__}")
            return []

        suggestions = [item.strip() for item in payload if isinstance(item, str) and item.strip()]
        return suggestions[:self.config.suggestion_count]
