from typing import List, Optional
from research_assistant.analysis import PaperAnalysisAgent
from research_assistant.comparison import PaperComparator
from research_assistant.config import ModelConfig
from research_assistant.data_models import (
    ComparisonResult,
    KnowledgeGraphData,
    PaperRecord,
    SinglePaperAnalysisResult,
)
from research_assistant.knowledge_graph import KnowledgeGraphBuilder
from research_assistant.llm_client import ModelGateway, ProxyGateway
from research_assistant.search_pipeline import PaperSearchPipeline
from research_assistant.suggestions import SuggestionGenerator


class ResearchAssistant:
    """
    Entry point for callers. Owns one gateway and hands it to every component.

    Construct it once at start-up; it keeps no per-call state.
    """

    def __init__(self, gateway: Optional[ModelGateway] = None, config: Optional[ModelConfig] = None):
        """
        Args:
            gateway (ModelGateway, optional): The gateway to use. Defaults to a ProxyGateway
                                              configured from the environment.
            config (ModelConfig, optional): Model tiers and limits.
        """
        self.gateway = gateway if gateway is not None else ProxyGateway()
        self.config = config or ModelConfig()

        self.search_pipeline = PaperSearchPipeline(self.gateway, self.config)
        self.suggestion_generator = SuggestionGenerator(self.gateway, self.config)
        self.comparator = PaperComparator(self.gateway, self.config)
        self.graph_builder = KnowledgeGraphBuilder(self.gateway, self.config)
        self.analysis_agent = PaperAnalysisAgent(self.gateway, self.config)

    async def search_papers(self, query: str) -> List[PaperRecord]:
        return await self.search_pipeline.search_papers(query)

    async def generate_suggestions(self, query: str) -> List[str]:
        return await self.suggestion_generator.generate_suggestions(query)

    async def generate_comparison(self, papers: List[PaperRecord]) -> ComparisonResult:
        return await self.comparator.generate_comparison(papers)

    async def generate_knowledge_graph(self, papers: List[PaperRecord]) -> KnowledgeGraphData:
        return await self.graph_builder.generate_knowledge_graph(papers)

    async def generate_single_paper_analysis(self, paper: PaperRecord) -> SinglePaperAnalysisResult:
        return await self.analysis_agent.generate_single_paper_analysis(paper)
