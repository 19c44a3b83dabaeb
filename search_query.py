#!/usr/bin/env python3
"""
Creator Query Script
Runs a free-text creator brief against a local dataset file or LanceDB directory
and prints the interpreted criteria plus the result page.
"""

import argparse
import json
import sys
from typing import Optional

from app.core.query_interpreter import QueryInterpreter
from app.core.repository import CreatorRecord, CreatorRepository, InMemoryCreatorRepository, RepositoryError
from app.core.search_engine import CreatorSearchEngine
from app.core.taxonomy import BrandTaxonomyResolver
from app.core.validator import CriteriaValidator
from app.services.search_service import CreatorSearchService
from app.services.summary import format_followers


def open_repository(dataset: Optional[str], db_path: Optional[str], table_name: str) -> CreatorRepository:
    """Open the dataset file when given, otherwise the LanceDB table"""
    if dataset:
        return InMemoryCreatorRepository.load(dataset)
    if not db_path:
        raise ValueError("Either --dataset or --db-path is required")

    from app.core.lance_repository import LanceCreatorRepository

    return LanceCreatorRepository(db_path, table_name=table_name)


def build_service(repository: CreatorRepository, taxonomy_path: Optional[str] = None) -> CreatorSearchService:
    return CreatorSearchService(
        engine=CreatorSearchEngine(repository),
        interpreter=QueryInterpreter(BrandTaxonomyResolver.from_file(taxonomy_path)),
        validator=CriteriaValidator(),
    )


def format_result(creator: CreatorRecord) -> str:
    """Format a creator for display"""
    output = []
    output.append(f"Username: {creator.username} ({creator.platform.value.lower()})")
    output.append(f"Display Name: {creator.display_name or 'N/A'}")
    output.append(f"Followers: {format_followers(creator.followers)}")
    output.append(f"Region: {creator.region.value if creator.region else 'N/A'}")
    output.append(f"Live: {'yes' if creator.is_live else 'no'}")
    if creator.current_game:
        output.append(f"Current: {creator.current_game}")
    if creator.tags:
        output.append(f"Tags: {', '.join(creator.tags[:8])}")
    return "\n".join(output)


def main(argv=None) -> int:
    """Main function"""
    parser = argparse.ArgumentParser(description="Run a creator brief against a local dataset")
    parser.add_argument("query", help="Free-text creator brief")
    parser.add_argument("--dataset", help="JSON/JSONL/CSV/Parquet creator dataset")
    parser.add_argument("--db-path", help="Path to LanceDB database")
    parser.add_argument("--table", default="creators", help="Table name (default: creators)")
    parser.add_argument("--taxonomy", help="JSON file overriding the brand/keyword taxonomy")
    parser.add_argument("--page", type=int, default=None, help="Result page (default: 1)")
    parser.add_argument("--json", action="store_true", help="Output results in JSON format")

    args = parser.parse_args(argv)

    try:
        repository = open_repository(args.dataset, args.db_path, args.table)
    except (ValueError, FileNotFoundError, RepositoryError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    service = build_service(repository, args.taxonomy)
    outcome = service.search(args.query, page=args.page)
    result = outcome.page

    if args.json:
        print(json.dumps(
            {
                "criteria": outcome.criteria.to_dict(),
                "summary": outcome.summary,
                "total_count": result.total_count,
                "page": result.page,
                "total_pages": result.total_pages,
                "has_more": result.has_more,
                "creators": [creator.to_dict() for creator in result.creators],
            },
            indent=2,
            default=str,
        ))
        return 0 if result.creators else 1

    print(f"Query: '{args.query}'")
    print(f"Criteria: {json.dumps(outcome.criteria.to_dict(), default=str)}")
    print(outcome.summary)

    if not result.creators:
        print("No results found.")
        return 1

    print(f"\nPage {result.page}/{result.total_pages} ({result.total_count} total):")
    print("=" * 50)
    for i, creator in enumerate(result.creators, 1):
        print(f"\nResult {i}:")
        print("-" * 30)
        print(format_result(creator))
    return 0


if __name__ == "__main__":
    sys.exit(main())
