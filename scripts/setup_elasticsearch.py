#!/usr/bin/env python3
"""
Setup script for the ChaosBoard Elasticsearch backend.

This script:
1. Verifies Elasticsearch connection
2. Creates the runs, scenarios and incidents indices
3. Generates a corpus and bulk-loads it

Usage:
    python scripts/setup_elasticsearch.py [--force] [--seed N]

Options:
    --force      Delete existing indices and recreate them
    --seed N     Generator seed, so the loaded corpus is reproducible
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.data.index_templates import create_indices, delete_indices  # noqa: E402
from src.data.mock_data import MockDataGenerator  # noqa: E402
from src.store.repository import load_corpus  # noqa: E402
from src.utils.config import get_settings  # noqa: E402
from src.utils.elasticsearch_client import (  # noqa: E402
    get_elasticsearch_client,
    index_counts,
    verify_connection,
)
from src.utils.logging_config import configure_logging  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Setup ChaosBoard Elasticsearch backend")
    parser.add_argument("--force", action="store_true", help="Delete and recreate indices")
    parser.add_argument("--seed", type=int, default=None, help="Generator seed")
    parser.add_argument("--runs", type=int, default=50, help="Number of runs to generate")
    parser.add_argument("--scenarios", type=int, default=24, help="Number of scenarios to generate")
    parser.add_argument("--incidents", type=int, default=30, help="Number of incidents to generate")
    args = parser.parse_args()

    configure_logging("INFO")

    print("=" * 60)
    print("ChaosBoard Elasticsearch Setup")
    print("=" * 60)

    # Step 1: Connect to Elasticsearch
    print("\n[1/3] Connecting to Elasticsearch...")
    try:
        client = get_elasticsearch_client()
        info = verify_connection(client)
    except (ValueError, ConnectionError) as e:
        print(f"\nError: {e}")
        print("\nPlease check your .env file and ensure Elasticsearch credentials are correct.")
        print("Copy .env.example to .env and fill in your credentials.")
        sys.exit(1)
    print(f"Connected to {info['cluster_name']} (version {info['version']})")

    # Step 2: Create indices
    print("\n[2/3] Creating indices...")
    if args.force:
        print("Force flag set - deleting existing indices...")
        delete_indices(client)
    create_indices(client, force=args.force)

    # Step 3: Generate and load the corpus
    seed = args.seed if args.seed is not None else get_settings().seed
    generator = MockDataGenerator(
        seed=seed,
        run_count=args.runs,
        scenario_count=args.scenarios,
        incident_count=args.incidents,
    )
    print(f"\n[3/3] Generating corpus (seed {generator.seed})...")
    corpus = generator.build_corpus()
    print(
        f"Generated {len(corpus.runs)} runs, {len(corpus.scenario_details)} scenarios, "
        f"{len(corpus.incidents)} incidents"
    )

    stats = load_corpus(client, corpus)

    print("\nIngestion complete:")
    print(f"  - Total documents: {stats['total']}")
    print(f"  - Successfully indexed: {stats['success']}")
    print(f"  - Failed: {stats['failed']}")

    print("\n[Verification] Checking indexed data...")
    for index_name, count in index_counts(client).items():
        print(f"  - {index_name}: {count if count is not None else 'missing'}")

    print("\n" + "=" * 60)
    print("Setup complete! ChaosBoard is ready to use.")
    print("=" * 60)
    print("\nNext steps:")
    print(f"  1. Set CHAOSBOARD_BACKEND=elasticsearch and CHAOSBOARD_SEED={generator.seed} in .env")
    print("  2. Run CLI: python -m src.cli runs --status failed")
    print("  3. Run dashboard: streamlit run src/dashboard.py")


if __name__ == "__main__":
    main()
