import logging
from typing import Optional
from langchain_core.prompts import PromptTemplate
from research_assistant.config import ModelConfig
from research_assistant.data_models import PaperRecord, SinglePaperAnalysisResult
from research_assistant.errors import AnalysisFailure
from research_assistant.llm_client import ModelGateway
from research_assistant.normalizer import extract_text, parse_json_payload
from research_assistant.schemas import SINGLE_PAPER_ANALYSIS_SCHEMA

SINGLE_PAPER_ANALYSIS_PROMPT = PromptTemplate.from_template(
    "Analyze this research paper and return structured insights in JSON.\n\n"
    "---\n"
    "Title: {title}\n"
    "Authors: {authors}\n"
    "Year: {year}\n"
    "Abstract: {abstract}\n"
    "---\n\n"
    "Output JSON:\n"
    "{{\n"
    "  \"summary\": \"Brief summary of the paper\",\n"
    "  \"keyConcepts\": \"- concept1\\n- concept2\",\n"
    "  \"methodology\": \"Explain the approach or experiment used\",\n"
    "  \"contributions\": \"- point1\\n- point2\",\n"
    "  \"futureWork\": \"Suggestions or future research directions\"\n"
    "}}"
)


class PaperAnalysisAgent:
    """
    The single-paper analysis engine. It takes one paper record and extracts
    a summary, key concepts, methodology, contributions and future work.
    """

    def __init__(self, gateway: ModelGateway, config: Optional[ModelConfig] = None):
        """
        Initializes the PaperAnalysisAgent.

        Args:
            gateway (ModelGateway): The model gateway.
            config (ModelConfig, optional): Model tiers. Defaults to ModelConfig().
        """
        self.gateway = gateway
        self.config = config or ModelConfig()

    async def generate_single_paper_analysis(self, paper: PaperRecord) -> SinglePaperAnalysisResult:
        """
        Runs the analysis on a single paper.

        Raises:
            AnalysisFailure: If the model call fails or its output does not match the expected shape.
        """
        logging.info(f"Starting analysis for paper: {paper.title}")
        try:
            prompt = SINGLE_PAPER_ANALYSIS_PROMPT.format(
                title=paper.title,
                authors=", ".join(paper.authors),
                year=paper.year,
                abstract=paper.abstract,
            )
            envelope = await self.gateway.invoke(
                prompt, self.config.pro_model, response_schema=SINGLE_PAPER_ANALYSIS_SCHEMA
            )
            payload = parse_json_payload(extract_text(envelope))
            result = SinglePaperAnalysisResult.model_validate(payload)
        except Exception as e:
            logging.error(f"An error occurred during analysis for paper {paper.id}: {e}")
            raise AnalysisFailure("Failed to generate structured single paper analysis.") from e

        logging.info(f"Successfully completed analysis for paper: {paper.title}")
        return result
