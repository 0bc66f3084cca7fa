"""
Response schema descriptors sent with structured requests.

The backend accepts an OpenAPI-style subset with upper-case type names. Each
descriptor mirrors one of the pydantic models in ``data_models`` using the wire
(camelCase) field names.
"""

PAPER_FIELDS = ["id", "title", "authors", "year", "abstract", "citationCount", "tldr"]

PAPER_LIST_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "STRING"},
            "title": {"type": "STRING"},
            "authors": {"type": "ARRAY", "items": {"type": "STRING"}},
            "year": {"type": "INTEGER"},
            "abstract": {"type": "STRING"},
            "citationCount": {"type": "INTEGER"},
            "tldr": {"type": "STRING"},
        },
        "required": PAPER_FIELDS,
    },
}

SUGGESTIONS_SCHEMA = {
    "type": "ARRAY",
    "items": {"type": "STRING"},
}

COMPARISON_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "comparison": {
            "type": "OBJECT",
            "properties": {
                "methodology": {"type": "STRING"},
                "keyFindings": {"type": "STRING"},
                "contributions": {"type": "STRING"},
                "contradictions": {"type": "STRING"},
                "researchGaps": {"type": "STRING"},
            },
            "required": ["methodology", "keyFindings", "contributions", "contradictions", "researchGaps"],
        },
    },
    "required": ["summary", "comparison"],
}

KNOWLEDGE_GRAPH_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "nodes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "label": {"type": "STRING"},
                    "group": {"type": "STRING", "enum": ["paper", "concept", "methodology"]},
                },
                "required": ["id", "label", "group"],
            },
        },
        "links": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "source": {"type": "STRING"},
                    "target": {"type": "STRING"},
                    "label": {"type": "STRING"},
                },
                "required": ["source", "target", "label"],
            },
        },
    },
    "required": ["nodes", "links"],
}

SINGLE_PAPER_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "keyConcepts": {"type": "STRING"},
        "methodology": {"type": "STRING"},
        "contributions": {"type": "STRING"},
        "futureWork": {"type": "STRING"},
    },
    "required": ["summary", "keyConcepts", "methodology", "contributions", "futureWork"],
}
