#!/usr/bin/env python3
# scripts/cies_facts.py

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pydantic import ValidationError

from cies.core.config import load_config
from cies.core.coordinator import EvaluationCoordinator
from cies.knowledge.codec import encode_fact
from cies.knowledge.filters import ArgumentFilter
from cies.knowledge.schema import Fact, FactValidationError
from cies.knowledge.store import FactStore, FactStoreError

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("cies_facts")


def load_facts_from_json(input_path: Path) -> List[Fact]:
    """Load Fact objects from a JSON file (a list, or {"facts": [...]})."""
    with open(input_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("facts", [])

    facts = []
    for item in data:
        try:
            facts.append(Fact.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Failed to parse fact: {e}")
            continue

    logger.info(f"Loaded {len(facts)} facts from {input_path}")
    return facts


def cmd_list(store: FactStore, args) -> int:
    conditions = []
    if args.contains:
        conditions.append(ArgumentFilter.contains(0, args.contains))
    for index, value in args.arg_equals or []:
        conditions.append(ArgumentFilter.equals(int(index), value))

    facts = store.list(args.predicate, conditions)
    if args.json:
        print(json.dumps([fact.model_dump() for fact in facts], indent=2, ensure_ascii=False))
    else:
        for fact in facts:
            print(encode_fact(fact))
    logger.info(f"Listed {len(facts)} facts")
    return 0


def cmd_add(store: FactStore, args) -> int:
    input_path = Path(args.input).resolve()
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        return 1

    facts = load_facts_from_json(input_path)
    if not facts:
        logger.error("No valid facts found in input")
        return 1

    try:
        written = store.append(facts, provenance=args.source, expires_at=args.expires)
    except (FactValidationError, FactStoreError) as e:
        logger.error(f"Failed to add facts: {e}")
        return 1

    logger.info(f"Added {len(written)} of {len(facts)} facts")
    return 0


def cmd_query(coordinator: EvaluationCoordinator, args) -> int:
    evaluations = coordinator.query_evaluations(
        content=args.content,
        level=args.level,
        min_score=args.min_score,
        max_score=args.max_score,
    )
    print(
        json.dumps(
            [e.model_dump(mode="json", by_alias=True) for e in evaluations],
            indent=2,
            ensure_ascii=False,
        )
    )
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="CIES Fact Store Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List every stored evaluation
  cies_facts.py list --predicate evaluation

  # Add hand-written facts with provenance and expiration
  cies_facts.py add --input facts.json --source analyst --expires 2027-01-01

  # Find credible evaluations scoring at least 80
  cies_facts.py query --level credible --min-score 80
        """,
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Configuration file path (default: config/config.yaml)",
    )
    parser.add_argument("--facts", help="Fact store path (overrides configuration)")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List stored facts")
    list_parser.add_argument("--predicate", help="Only facts with this predicate")
    list_parser.add_argument("--contains", help="First argument contains this text")
    list_parser.add_argument(
        "--arg-equals",
        nargs=2,
        action="append",
        metavar=("INDEX", "VALUE"),
        help="Argument at INDEX equals VALUE (repeatable)",
    )
    list_parser.add_argument("--json", action="store_true", help="Output JSON")

    add_parser = subparsers.add_parser("add", help="Append facts from a JSON file")
    add_parser.add_argument("--input", required=True, help="JSON file with facts")
    add_parser.add_argument("--source", help="Provenance label")
    add_parser.add_argument("--expires", help="Advisory expiration date (ISO 8601)")

    query_parser = subparsers.add_parser("query", help="Search stored evaluations")
    query_parser.add_argument("--content", help="Content substring")
    query_parser.add_argument(
        "--level", choices=["suspect", "doubtful", "credible"], help="Credibility level"
    )
    query_parser.add_argument("--min-score", type=float, help="Minimum score")
    query_parser.add_argument("--max-score", type=float, help="Maximum score")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)
    store = FactStore(args.facts or config.store.facts_path)

    if args.command == "list":
        sys.exit(cmd_list(store, args))
    if args.command == "add":
        sys.exit(cmd_add(store, args))
    sys.exit(cmd_query(EvaluationCoordinator.from_config(config, store=store), args))


if __name__ == "__main__":
    main()
