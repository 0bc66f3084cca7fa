import re
import math
import logging
from datetime import datetime
from typing import Any, List, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_AUTHOR = "Unknown"
DEFAULT_ABSTRACT = "Abstract not available."


def current_year() -> int:
    return datetime.now().year


def first_sentence(text: str) -> str:
    """Returns the first sentence of a block of text, or the whole text if it has no terminator."""
    text = text.strip()
    match = re.match(r"(.+?[.!?])(?:\s|$)", text, re.DOTALL)
    return match.group(1) if match else text


def slugify(title: str, year: int) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-") or "paper"
    return f"{slug}-{year}"


def _clean_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _coerce_year(value: Any) -> int:
    if isinstance(value, bool):
        return current_year()
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return current_year()
        year = int(value)
    elif isinstance(value, str):
        match = re.search(r"\d{4}", value)
        if not match:
            return current_year()
        year = int(match.group())
    else:
        return current_year()
    return year if 1000 <= year <= 9999 else current_year()


def _coerce_citation_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        match = re.search(r"-?\d[\d,]*", value)
        if not match:
            return 0
        value = int(match.group().replace(",", ""))
    if isinstance(value, (int, float)):
        return max(int(value), 0) if math.isfinite(value) else 0
    return 0


def _coerce_authors(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return (DEFAULT_AUTHOR,)
    authors = tuple(author.strip() for author in value if isinstance(author, str) and author.strip())
    return authors or (DEFAULT_AUTHOR,)


class PaperRecord(BaseModel):
    """
    A structured paper record produced by the search pipeline.

    Missing source information is replaced with the same defaults the structuring
    prompt asks the model to use, so a record is always complete once built.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Unique identifier, e.g. arXiv ID, DOI or a title/year slug.")
    title: str = Field(min_length=1, description="Full title of the paper.")
    authors: Tuple[str, ...] = Field(min_length=1, description="Primary authors, in order.")
    year: int = Field(ge=1000, le=9999, description="Publication year.")
    abstract: str = Field(description="A concise abstract.")
    citation_count: int = Field(alias="citationCount", ge=0, description="Number of citations.")
    tldr: str = Field(description="One-sentence summary.")

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        title = data.get("title")
        if isinstance(title, str):
            data["title"] = title.strip()

        data["authors"] = _coerce_authors(data.get("authors"))
        data["year"] = _coerce_year(data.get("year"))

        abstract = _clean_str(data.get("abstract")) or DEFAULT_ABSTRACT
        data["abstract"] = abstract
        data["tldr"] = _clean_str(data.get("tldr")) or first_sentence(abstract)

        raw_count = data.pop("citation_count", data.get("citationCount"))
        data["citationCount"] = _coerce_citation_count(raw_count)

        paper_id = data.get("id")
        if isinstance(paper_id, (int, float)) and not isinstance(paper_id, bool):
            paper_id = str(paper_id)
        paper_id = _clean_str(paper_id)
        if not paper_id and isinstance(title, str) and title.strip():
            paper_id = slugify(title, data["year"])
        data["id"] = paper_id
        return data


class ComparisonDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    methodology: str
    key_findings: str = Field(alias="keyFindings")
    contributions: str
    contradictions: str
    research_gaps: str = Field(alias="researchGaps")


class ComparisonResult(BaseModel):
    """Comparative analysis of two or more papers."""
    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(description="Overall comparison summary.")
    comparison: ComparisonDetails


class GraphNode(BaseModel):
    id: str
    label: str
    group: str = Field(description="Category such as 'paper', 'concept' or 'methodology'.")

    @field_validator("group")
    @classmethod
    def normalize_group(cls, value: str) -> str:
        return value.strip().lower()


class GraphLink(BaseModel):
    source: str
    target: str
    label: str = ""


class KnowledgeGraphData(BaseModel):
    """
    Entities and relationships extracted from a set of papers.

    The model does not guarantee referential integrity, so validation keeps the first
    node for each id and drops links that point at unknown nodes.
    """
    nodes: List[GraphNode]
    links: List[GraphLink]

    @model_validator(mode="after")
    def prune_dangling_links(self) -> "KnowledgeGraphData":
        unique_nodes = {}
        for node in self.nodes:
            unique_nodes.setdefault(node.id, node)
        if len(unique_nodes) != len(self.nodes):
            logging.warning(f"Dropped {len(self.nodes) - len(unique_nodes)} duplicate knowledge graph nodes.")
        self.nodes = list(unique_nodes.values())

        valid_links = [link for link in self.links if link.source in unique_nodes and link.target in unique_nodes]
        if len(valid_links) != len(self.links):
            logging.warning(f"Dropped {len(self.links) - len(valid_links)} knowledge graph links with unknown endpoints.")
        self.links = valid_links
        return self


class SinglePaperAnalysisResult(BaseModel):
    """Structured insights for a single paper."""
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    key_concepts: str = Field(alias="keyConcepts")
    methodology: str
    contributions: str
    future_work: str = Field(alias="futureWork")

    @field_validator("key_concepts", "contributions", mode="before")
    @classmethod
    def join_bullets(cls, value: Any) -> Any:
        # Models sometimes answer with a list instead of the requested bullet string.
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return "\n".join(f"- {item.strip()}" for item in value)
        return value
