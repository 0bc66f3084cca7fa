import logging
from typing import List, Optional
from langchain_core.prompts import PromptTemplate
from research_assistant.config import ModelConfig
from research_assistant.data_models import KnowledgeGraphData, PaperRecord
from research_assistant.errors import KnowledgeGraphFailure
from research_assistant.llm_client import ModelGateway
from research_assistant.normalizer import extract_text, parse_json_payload
from research_assistant.schemas import KNOWLEDGE_GRAPH_SCHEMA

KNOWLEDGE_GRAPH_PROMPT = PromptTemplate.from_template(
    "You are an AI that constructs knowledge graphs from research papers.\n\n"
    "Extract entities and relationships from the following papers:\n"
    "{papers}\n\n"
    "Return data in strict JSON format:\n"
    "{{\n"
    "  \"nodes\": [\n"
    "    {{ \"id\": \"unique_id\", \"label\": \"Entity or concept\", \"group\": \"paper|concept|methodology\" }}\n"
    "  ],\n"
    "  \"links\": [\n"
    "    {{ \"source\": \"node_id\", \"target\": \"node_id\", \"label\": \"relates_to|builds_on|uses\" }}\n"
    "  ]\n"
    "}}\n"
    "Every link must use node ids that appear in \"nodes\"."
)


class KnowledgeGraphBuilder:
    """
    Extracts a concept graph spanning a set of papers.
    """

    def __init__(self, gateway: ModelGateway, config: Optional[ModelConfig] = None):
        self.gateway = gateway
        self.config = config or ModelConfig()

    def _format_papers(self, papers: List[PaperRecord]) -> str:
        return "\n".join(f"---\nTitle: {paper.title}\nAbstract: {paper.abstract}\n---" for paper in papers)

    async def generate_knowledge_graph(self, papers: List[PaperRecord]) -> KnowledgeGraphData:
        """
        Builds the knowledge graph for the given papers.

        Links whose endpoints are not among the returned nodes are dropped during
        validation rather than failing the whole graph.

        Raises:
            KnowledgeGraphFailure: If no papers are given or the model output is unusable.
        """
        if not papers:
            raise KnowledgeGraphFailure("Select at least one paper to build a knowledge graph.")

        logging.info(f"Building knowledge graph for {len(papers)} papers.")
        try:
            prompt = KNOWLEDGE_GRAPH_PROMPT.format(papers=self._format_papers(papers))
            envelope = await self.gateway.invoke(prompt, self.config.fast_model, response_schema=KNOWLEDGE_GRAPH_SCHEMA)
            payload = parse_json_payload(extract_text(envelope))
            graph = KnowledgeGraphData.model_validate(payload)
        except Exception as e:
            logging.error(f"Error generating knowledge graph: {e}")
            raise KnowledgeGraphFailure("Failed to generate knowledge graph data.") from e

        logging.info(f"Knowledge graph has {len(graph.nodes)} nodes and {len(graph.links)} links.")
        return graph
