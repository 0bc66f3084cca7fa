import pytest
from pydantic import ValidationError

from research_assistant.data_models import (
    ComparisonResult,
    KnowledgeGraphData,
    PaperRecord,
    SinglePaperAnalysisResult,
    current_year,
    first_sentence,
)


@pytest.fixture
def full_paper_data():
    return {
        "id": "1706.03762",
        "title": "Attention Is All You Need",
        "authors": ["Ashish Vaswani", "Noam Shazeer"],
        "year": 2017,
        "abstract": "We propose the Transformer. It relies entirely on attention.",
        "citationCount": 120000,
        "tldr": "Attention replaces recurrence.",
    }


def test_paper_record_keeps_complete_data(full_paper_data):
    paper = PaperRecord.model_validate(full_paper_data)

    assert paper.id == "1706.03762"
    assert paper.authors == ("Ashish Vaswani", "Noam Shazeer")
    assert paper.citation_count == 120000
    assert paper.model_dump(mode="json", by_alias=True) == full_paper_data


def test_paper_record_applies_defaults():
    paper = PaperRecord.model_validate({"title": "Deep Residual Learning"})

    assert paper.authors == ("Unknown",)
    assert paper.year == current_year()
    assert paper.abstract == "Abstract not available."
    assert paper.citation_count == 0
    assert paper.tldr == "Abstract not available."
    assert paper.id == f"deep-residual-learning-{current_year()}"


def test_paper_record_tldr_defaults_to_first_sentence(full_paper_data):
    full_paper_data["tldr"] = ""
    paper = PaperRecord.model_validate(full_paper_data)
    assert paper.tldr == "We propose the Transformer."


@pytest.mark.parametrize(
    "raw_year, expected",
    [("2019", 2019), ("Published in 2021", 2021), (2020.0, 2020), (17, None), ("unknown", None), (None, None)],
)
def test_paper_record_year_coercion(full_paper_data, raw_year, expected):
    full_paper_data["year"] = raw_year
    paper = PaperRecord.model_validate(full_paper_data)
    assert paper.year == (expected or current_year())


@pytest.mark.parametrize("raw_count, expected", [("1,234", 1234), (-5, 0), ("n/a", 0), (None, 0), (12.7, 12)])
def test_paper_record_citation_count_coercion(full_paper_data, raw_count, expected):
    full_paper_data["citationCount"] = raw_count
    assert PaperRecord.model_validate(full_paper_data).citation_count == expected


def test_paper_record_ignores_non_finite_numbers(full_paper_data):
    full_paper_data["year"] = float("inf")
    full_paper_data["citationCount"] = float("-inf")
    paper = PaperRecord.model_validate(full_paper_data)
    assert paper.year == current_year()
    assert paper.citation_count == 0

    full_paper_data["year"] = float("nan")
    full_paper_data["citationCount"] = float("nan")
    paper = PaperRecord.model_validate(full_paper_data)
    assert paper.year == current_year()
    assert paper.citation_count == 0


def test_paper_record_authors_coercion(full_paper_data):
    full_paper_data["authors"] = "Geoffrey Hinton"
    assert PaperRecord.model_validate(full_paper_data).authors == ("Geoffrey Hinton",)

    full_paper_data["authors"] = ["", "  "]
    assert PaperRecord.model_validate(full_paper_data).authors == ("Unknown",)


def test_paper_record_accepts_python_field_names(full_paper_data):
    full_paper_data.pop("citationCount")
    full_paper_data["citation_count"] = 7
    assert PaperRecord.model_validate(full_paper_data).citation_count == 7


def test_paper_record_requires_title(full_paper_data):
    full_paper_data["title"] = "   "
    with pytest.raises(ValidationError):
        PaperRecord.model_validate(full_paper_data)


def test_paper_record_is_immutable(full_paper_data):
    paper = PaperRecord.model_validate(full_paper_data)
    with pytest.raises(ValidationError):
        paper.title = "Changed"


def test_paper_record_authors_cannot_be_mutated(full_paper_data):
    paper = PaperRecord.model_validate(full_paper_data)

    assert isinstance(paper.authors, tuple)
    with pytest.raises(AttributeError):
        paper.authors.append("Someone Else")
    assert paper.authors == ("Ashish Vaswani", "Noam Shazeer")


def test_first_sentence():
    assert first_sentence("One. Two.") == "One."
    assert first_sentence("No terminator here") == "No terminator here"


def test_comparison_result_requires_every_field():
    body = {
        "summary": "s",
        "comparison": {
            "methodology": "m",
            "keyFindings": "k",
            "contributions": "c",
            "contradictions": "x",
        },
    }
    with pytest.raises(ValidationError):
        ComparisonResult.model_validate(body)


def test_knowledge_graph_drops_dangling_links_and_duplicate_nodes(caplog):
    graph = KnowledgeGraphData.model_validate({
        "nodes": [
            {"id": "p1", "label": "Transformer paper", "group": "Paper"},
            {"id": "c1", "label": "Self-attention", "group": "concept"},
            {"id": "c1", "label": "Duplicate", "group": "concept"},
        ],
        "links": [
            {"source": "p1", "target": "c1", "label": "uses"},
            {"source": "p1", "target": "missing", "label": "builds_on"},
        ],
    })

    assert [node.id for node in graph.nodes] == ["p1", "c1"]
    assert graph.nodes[0].group == "paper"
    assert graph.nodes[1].label == "Self-attention"
    assert len(graph.links) == 1
    assert graph.links[0].target == "c1"
    assert "links with unknown endpoints" in caplog.text


def test_knowledge_graph_requires_nodes_and_links():
    with pytest.raises(ValidationError):
        KnowledgeGraphData.model_validate({"nodes": []})


def test_single_paper_analysis_joins_list_answers():
    result = SinglePaperAnalysisResult.model_validate({
        "summary": "s",
        "keyConcepts": ["attention", "encoder-decoder"],
        "methodology": "m",
        "contributions": "- one\n- two",
        "futureWork": "f",
    })
    assert result.key_concepts == "- attention\n- encoder-decoder"
    assert result.contributions == "- one\n- two"
