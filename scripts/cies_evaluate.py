#!/usr/bin/env python3
# scripts/cies_evaluate.py

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pydantic import ValidationError

from cies.core.config import load_config
from cies.core.coordinator import EvaluationCoordinator
from cies.credibility.scenarios import TEST_SCENARIOS, get_scenario
from cies.credibility.schema import EvaluationInput
from cies.knowledge.store import FactStore

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("cies_evaluate")


def load_inputs(input_path: Path) -> List[Any]:
    """Load one input object or a list of them from a JSON file."""
    with open(input_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, list) else [data]


def main():
    parser = argparse.ArgumentParser(
        description="CIES Credibility Evaluation Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Evaluate a single item (or a list of up to 10 items)
  cies_evaluate.py --input item.json --output result.json

  # Run a built-in scenario against a scratch store
  cies_evaluate.py --scenario case2_credible_info --facts /tmp/facts.pl

Scenarios: {", ".join(sorted(TEST_SCENARIOS))}
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="JSON file with one input object or a list")
    source.add_argument("--scenario", help="Name of a built-in test scenario")
    parser.add_argument("--output", help="Write JSON result(s) here instead of stdout")
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Configuration file path (default: config/config.yaml)",
    )
    parser.add_argument("--facts", help="Fact store path (overrides configuration)")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)
    store = FactStore(args.facts or config.store.facts_path)
    coordinator = EvaluationCoordinator.from_config(config, store=store)

    if args.scenario:
        try:
            result = coordinator.evaluate_and_save(get_scenario(args.scenario))
        except KeyError as e:
            logger.error(str(e))
            sys.exit(1)
        output = result.model_dump(mode="json", by_alias=True)
    else:
        input_path = Path(args.input).resolve()
        if not input_path.exists():
            logger.error(f"Input file not found: {input_path}")
            sys.exit(1)

        items = load_inputs(input_path)
        if len(items) == 1:
            try:
                info = EvaluationInput.model_validate(items[0])
            except ValidationError as e:
                logger.error(f"Invalid input: {e}")
                sys.exit(1)
            output = coordinator.evaluate_and_save(info).model_dump(mode="json", by_alias=True)
        else:
            try:
                results = coordinator.evaluate_batch(items)
            except ValueError as e:
                logger.error(str(e))
                sys.exit(1)
            output = [r.model_dump(mode="json", by_alias=True) for r in results]

    text = json.dumps(output, indent=2, ensure_ascii=False)
    if args.output:
        output_path = Path(args.output).resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote evaluation output to {output_path}")
    else:
        print(text)


if __name__ == "__main__":
    main()
