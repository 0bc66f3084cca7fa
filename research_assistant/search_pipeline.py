import logging
from typing import List, Optional

# if python version is <3.12, use TypedDict
import sys
if sys.version_info < (3, 12):
    from typing_extensions import TypedDict
else:
    from typing import TypedDict

from langchain_core.prompts import PromptTemplate
from langgraph.graph import StateGraph, END
from langgraph.graph.state import CompiledStateGraph
from pydantic import ValidationError
from research_assistant.config import ModelConfig
from research_assistant.data_models import PaperRecord, current_year
from research_assistant.errors import EmptyOutput, ResearchAssistantError, StructuringFailure, UnexpectedFailure
from research_assistant.llm_client import ModelGateway
from research_assistant.normalizer import extract_text, parse_json_payload
from research_assistant.schemas import PAPER_LIST_SCHEMA

RETRIEVAL_PROMPT = PromptTemplate.from_template(
    "You are an expert research assistant. Your task is to use Google Search to find academic papers "
    "related to the query: \"{query}\".\n\n"
    "Synthesize the information you find for up to {max_results} of the most relevant papers into a single, "
    "unstructured block of text.\n"
    "For each paper you find, include as much of the following information as possible:\n"
    "- The title\n"
    "- The authors\n"
    "- The publication year\n"
    "- A short abstract or summary\n"
    "- The number of citations\n\n"
    "It is okay if some information is missing. Just present what you find clearly. "
    "Do not format the output as JSON. Just return the text."
)

STRUCTURING_PROMPT = PromptTemplate.from_template(
    "You are a data extraction and formatting expert. You will be given a block of text containing "
    "unstructured information about academic papers. Your sole task is to parse this text and convert it "
    "into a structured JSON array of paper objects.\n\n"
    "**Input Text:**\n---\n{raw_text}\n---\n\n"
    "**Output JSON Schema:**\n"
    "For each paper you can identify in the text, create a JSON object with the following fields:\n"
    "- id: A unique identifier (e.g., arXiv ID or DOI if present). If unavailable, create a unique slug "
    "from the title and year.\n"
    "- title: The full title of the paper.\n"
    "- authors: An array of strings with the primary authors' names. If unavailable, use [\"Unknown\"].\n"
    "- year: The publication year as a number. If unavailable, use {current_year}.\n"
    "- abstract: A concise and informative abstract of the paper. If unavailable, use \"Abstract not available.\"\n"
    "- citationCount: The number of citations. If unknown, use 0.\n"
    "- tldr: A one-sentence \"Too Long; Didn't Read\" summary based on the abstract. If you cannot create one, "
    "use the first sentence of the abstract.\n\n"
    "Your entire response MUST be a single, raw JSON array. If you cannot identify any valid papers in the "
    "input text, you MUST return an empty array []."
)

# The relay substitutes this text when the backend produced no candidate text.
RELAY_EMPTY_PLACEHOLDER = "No response"

STRUCTURING_ERROR_MESSAGE = "The AI failed to format the search results. This may be a temporary issue."


# --- Graph State ---
class SearchState(TypedDict):
    """The state of the search graph."""
    query: str
    raw_text: str
    papers: List[PaperRecord]


def ensure_unique_ids(papers: List[PaperRecord]) -> List[PaperRecord]:
    """Suffixes repeated ids (-2, -3, ...) so every record in a result set has its own id."""
    seen = set()
    unique = []
    for paper in papers:
        paper_id = paper.id
        suffix = 2
        while paper_id in seen:
            paper_id = f"{paper.id}-{suffix}"
            suffix += 1
        if paper_id != paper.id:
            paper = paper.model_copy(update={"id": paper_id})
        seen.add(paper_id)
        unique.append(paper)
    return unique


class PaperSearchPipeline:
    """
    Two-stage paper search: web-grounded free-text retrieval, then JSON structuring.

    Stage 1 asks the high-capability model for plain prose so that retrieval is not
    limited by format compliance. Stage 2 hands that prose to the cheaper model with
    a strict schema. There are no retries; each stage runs at most once per search.
    """

    def __init__(self, gateway: ModelGateway, config: Optional[ModelConfig] = None):
        """
        Initializes the PaperSearchPipeline.

        Args:
            gateway (ModelGateway): The gateway used for both stages.
            config (ModelConfig, optional): Model tiers and limits. Defaults to ModelConfig().
        """
        self.gateway = gateway
        self.config = config or ModelConfig()
        self.graph = self._build_graph()

    async def retrieve_raw_papers(self, query: str) -> str:
        """
        Stage 1: gathers unstructured text about candidate papers.

        Returns:
            str: The raw text, or "" if nothing was found.
        """
        prompt = RETRIEVAL_PROMPT.format(query=query, max_results=self.config.max_search_results)
        envelope = await self.gateway.invoke(prompt, self.config.pro_model, grounding_enabled=True)
        try:
            raw_text = extract_text(envelope)
            if raw_text == RELAY_EMPTY_PLACEHOLDER:
                raise EmptyOutput("The relay returned its empty-response placeholder.")
            return raw_text
        except EmptyOutput:
            logging.warning(
                "Stage 1 (Data Gathering) returned no text. This likely means no relevant papers "
                "were found on the web for the query."
            )
            return ""

    async def structure_papers(self, raw_text: str) -> List[PaperRecord]:
        """
        Stage 2: converts the raw text into validated PaperRecord objects.

        Raises:
            StructuringFailure: If the model output is not a JSON array of paper objects.
        """
        if not raw_text.strip():
            return []

        prompt = STRUCTURING_PROMPT.format(raw_text=raw_text, current_year=current_year())
        envelope = await self.gateway.invoke(prompt, self.config.fast_model, response_schema=PAPER_LIST_SCHEMA)

        try:
            payload = parse_json_payload(extract_text(envelope))
        except (EmptyOutput, ValueError) as e:
            logging.error(f"Error in Stage 2 (structure_papers): {e}")
            raise StructuringFailure(STRUCTURING_ERROR_MESSAGE) from e

        if not isinstance(payload, list):
            logging.error(f"Error in Stage 2 (structure_papers): expected a JSON array, got {type(payload).__name__}")
            raise StructuringFailure(STRUCTURING_ERROR_MESSAGE)

        try:
            papers = [PaperRecord.model_validate(item) for item in payload]
        except ValidationError as e:
            logging.error(f"Error in Stage 2 (structure_papers): invalid paper record: {e}")
            raise StructuringFailure(STRUCTURING_ERROR_MESSAGE) from e

        return ensure_unique_ids(papers)

    async def search_papers(self, query: str) -> List[PaperRecord]:
        """
        Runs both stages end to end.

        Errors from the known taxonomy propagate unchanged; anything else is wrapped
        in UnexpectedFailure.
        """
        if not query or not query.strip():
            raise ValueError("query must be a non-empty string")

        logging.info(f"Starting two-stage search for: {query}")
        try:
            final_state = await self.graph.ainvoke({"query": query, "raw_text": "", "papers": []})
        except ResearchAssistantError as e:
            logging.error(f"Error in the two-step paper search pipeline: {e}")
            raise
        except Exception as e:
            logging.error(f"Unexpected error in the two-step paper search pipeline: {e}", exc_info=True)
            raise UnexpectedFailure("An unexpected error occurred during the paper search.") from e

        papers = final_state["papers"]
        logging.info(f"Search for '{query}' produced {len(papers)} papers.")
        return papers

    # --- Node Definitions ---

    async def _retrieve_node(self, state: SearchState) -> dict:
        logging.info("--- Running Retrieve Node ---")
        return {"raw_text": await self.retrieve_raw_papers(state["query"])}

    async def _structure_node(self, state: SearchState) -> dict:
        logging.info("--- Running Structure Node ---")
        return {"papers": await self.structure_papers(state["raw_text"])}

    @staticmethod
    def _route_after_retrieve(state: SearchState) -> str:
        # Nothing found: skip the structuring call entirely.
        return "structure" if state["raw_text"].strip() else END

    def _build_graph(self) -> CompiledStateGraph:
        workflow = StateGraph(SearchState)

        workflow.add_node("retrieve", self._retrieve_node)
        workflow.add_node("structure", self._structure_node)

        workflow.set_entry_point("retrieve")
        workflow.add_conditional_edges("retrieve", self._route_after_retrieve, {"structure": "structure", END: END})
        workflow.add_edge("structure", END)

        return workflow.compile()
