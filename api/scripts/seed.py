import argparse
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from rcmatch.config import DATABASE_URL
from rcmatch.main import build_core
from rcmatch.services.seeding import reset_core_tables, seed_demo_profiles


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo RC Match profiles")
    parser.add_argument("--database-url", type=str, default=DATABASE_URL)
    parser.add_argument("--n-organizations", type=int, default=8)
    parser.add_argument("--n-individuals", type=int, default=24)
    parser.add_argument("--reset", action="store_true")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    core = build_core(args.database_url)
    if args.reset:
        with core.session_factory() as db:
            reset_core_tables(db)
            db.commit()
    summary = seed_demo_profiles(
        core,
        n_organizations=args.n_organizations,
        n_individuals=args.n_individuals,
        seed=args.seed,
    )
    print(summary)


if __name__ == "__main__":
    main()
