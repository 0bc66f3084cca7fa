import os
import logging
from pydantic import BaseModel, Field
from dotenv import load_dotenv, find_dotenv

# Load environment variables from .env file
load_dotenv(find_dotenv())

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


class ModelConfig(BaseModel):
    """
    Model tiers and result limits shared by the search pipeline and the transforms.
    """
    fast_model: str = Field(
        default_factory=lambda: os.getenv("RESEARCH_ASSISTANT_FAST_MODEL", "gemini-2.5-flash"),
        description="Cheaper, faster model used for extraction and formatting."
    )
    pro_model: str = Field(
        default_factory=lambda: os.getenv("RESEARCH_ASSISTANT_PRO_MODEL", "gemini-2.5-pro"),
        description="Higher-capability model used for synthesis and web-grounded retrieval."
    )
    max_search_results: int = Field(default=7, description="Upper bound on papers requested from stage 1.")
    suggestion_count: int = Field(default=3, description="Number of related queries to suggest.")
