import logging
from typing import List, Optional
from langchain_core.prompts import PromptTemplate
from research_assistant.config import ModelConfig
from research_assistant.data_models import ComparisonResult, PaperRecord
from research_assistant.errors import ComparisonFailure
from research_assistant.llm_client import ModelGateway
from research_assistant.normalizer import extract_text, parse_json_payload
from research_assistant.schemas import COMPARISON_SCHEMA

COMPARISON_PROMPT = PromptTemplate.from_template(
    "You are a world-class AI research analyst. Compare the following academic papers comprehensively.\n\n"
    "{papers}\n\n"
    "Return the response as **strict JSON** in this schema:\n"
    "{{\n"
    "  \"summary\": \"Overall comparison summary\",\n"
    "  \"comparison\": {{\n"
    "    \"methodology\": \"Detailed comparison of methods\",\n"
    "    \"keyFindings\": \"Core findings comparison\",\n"
    "    \"contributions\": \"Unique contributions\",\n"
    "    \"contradictions\": \"Differences or opposing results\",\n"
    "    \"researchGaps\": \"Gaps or unexplored areas\"\n"
    "  }}\n"
    "}}"
)


def format_paper(paper: PaperRecord) -> str:
    return (
        "---\n"
        f"Title: {paper.title}\n"
        f"Authors: {', '.join(paper.authors)}\n"
        f"Year: {paper.year}\n"
        f"Abstract: {paper.abstract}\n"
        "---"
    )


class PaperComparator:
    """
    Produces a side-by-side analysis of several papers.
    """

    def __init__(self, gateway: ModelGateway, config: Optional[ModelConfig] = None):
        self.gateway = gateway
        self.config = config or ModelConfig()

    async def generate_comparison(self, papers: List[PaperRecord]) -> ComparisonResult:
        """
        Compares the given papers.

        Raises:
            ComparisonFailure: If fewer than two papers are given or the model output is unusable.
        """
        if len(papers) < 2:
            raise ComparisonFailure("Select at least two papers to compare.")

        logging.info(f"Comparing {len(papers)} papers.")
        try:
            prompt = COMPARISON_PROMPT.format(papers="\n".join(format_paper(paper) for paper in papers))
            envelope = await self.gateway.invoke(prompt, self.config.pro_model, response_schema=COMPARISON_SCHEMA)
            payload = parse_json_payload(extract_text(envelope))
            return ComparisonResult.model_validate(payload)
        except Exception as e:
            logging.error(f"Error generating paper comparison: {e}")
            raise ComparisonFailure("Failed to generate paper comparison analysis.") from e
