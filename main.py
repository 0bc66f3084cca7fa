import os
import json
import asyncio
import logging
import argparse
from dotenv import load_dotenv, find_dotenv
from research_assistant.assistant import ResearchAssistant
from research_assistant.errors import ResearchAssistantError

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


def parse_args() -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Search for papers and analyze them with an LLM backend")
    parser.add_argument(
        "command",
        choices=["search", "suggest", "compare", "graph", "analyze"],
        help=(
            "'search' prints structured paper records. 'suggest' prints related queries. "
            "'compare', 'graph' and 'analyze' search first and run the transform on the results."
        ),
    )
    parser.add_argument("query", help="Free-text research query")
    parser.add_argument("--limit", type=int, default=None, help="Only use the first N papers found")
    return parser.parse_args()


async def run(command: str, query: str, limit: int | None) -> object:
    """Runs one command and returns a JSON-serialisable result."""
    assistant = ResearchAssistant()

    if command == "suggest":
        return await assistant.generate_suggestions(query)

    papers = await assistant.search_papers(query)
    if limit is not None:
        papers = papers[:limit]

    if command == "search":
        return [paper.model_dump(by_alias=True) for paper in papers]
    if not papers:
        logging.warning(f"No papers found for '{query}'. Nothing to {command}.")
        return None
    if command == "compare":
        return (await assistant.generate_comparison(papers)).model_dump(by_alias=True)
    if command == "graph":
        return (await assistant.generate_knowledge_graph(papers)).model_dump(by_alias=True)
    return (await assistant.generate_single_paper_analysis(papers[0])).model_dump(by_alias=True)


def main():
    """
    The main entry point for the research assistant CLI.
    """
    # Load environment variables from .env file
    load_dotenv(find_dotenv())
    args = parse_args()

    if not os.getenv("RESEARCH_ASSISTANT_PROXY_URL"):
        logging.error("FATAL: RESEARCH_ASSISTANT_PROXY_URL environment variable not set.")
        print("Please create a .env file and add your RESEARCH_ASSISTANT_PROXY_URL.")
        return

    try:
        result = asyncio.run(run(args.command, args.query, args.limit))
    except (ResearchAssistantError, ValueError) as e:
        logging.error(f"The assistant failed to complete the '{args.command}' command. Error: {e}")
        print(f"\nAn error occurred: {e}")
        return

    print(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
