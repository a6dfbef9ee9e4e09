"""
Culinary Job Scout — job aggregation pipeline
CLI entry point for running the fetch → classify → dedup → enrich workflow.
"""

import argparse
import sqlite3
import sys
import os
import time
from functools import partial

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.settings import settings
from models.errors import IdentityIndexUnavailable
from models.results import PipelineResult
from tools.api_fetcher import PROVIDER_SEARCHES
from tools.file_handler import load_search_plan, save_to_json, save_to_csv, generate_summary
from tools.job_store import init_db, load_existing_identities, upsert_jobs, get_job_count
from tools.rules_loader import ExclusionRulesCache, load_rule_set
from tools.website_lookup import lookup_company_website
from graph.workflow import run_pipeline_sync


def run_once(
    search_plan: list[dict],
    rules_cache: ExclusionRulesCache,
    allow_missing_index: bool = False,
    dry_run: bool = False,
    output_dir: str = None,
) -> PipelineResult:
    """Run one pipeline cycle, persist the kept jobs and write output files."""
    result = run_pipeline_sync(
        rules=rules_cache.get(),
        load_existing_identities=partial(load_existing_identities, settings.jobs_table, settings.db_path),
        lookup_company_website=None if settings.skip_enrichment else lookup_company_website,
        search_plan=search_plan,
        searchers=PROVIDER_SEARCHES,
        allow_missing_index=allow_missing_index,
    )

    if result.jobs and not dry_run:
        saved = upsert_jobs(result.jobs, settings.jobs_table, settings.db_path)
        new = sum(1 for r in saved if r.was_new)
        print(f"💾 Stored {len(saved)} jobs ({new} new, {len(saved) - new} updated)")

    if output_dir and result.jobs:
        save_to_json(result.jobs, output_dir)
        save_to_csv(result.jobs, output_dir)
        print(generate_summary(result.jobs))

    if result.errors:
        print(f"⚠️  {len(result.errors)} error(s):")
        for e in result.errors:
            print(f"   - {e}")

    return result


def main():
    """Main entry point for the culinary job pipeline."""
    parser = argparse.ArgumentParser(
        description="Culinary Job Scout — job aggregation pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py
  python run.py --plan config/search_plan.yaml --output-dir results/
  python run.py --dry-run --skip-enrichment
  python run.py --schedule 60
        """,
    )

    parser.add_argument(
        "--plan",
        type=str,
        default=settings.search_plan_path,
        help="Path to search plan YAML (default: config/search_plan.yaml)",
    )
    parser.add_argument(
        "--rules",
        type=str,
        default=settings.exclusion_rules_path,
        help="Path to exclusion rules YAML (default: config/exclusion_rules.yaml)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Also write emitted jobs as JSON and CSV to this directory",
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help=f"SQLite job store (default: {settings.db_path})",
    )
    parser.add_argument(
        "--table",
        type=str,
        default=None,
        help=f"Jobs table name (default: {settings.jobs_table})",
    )
    parser.add_argument(
        "--skip-enrichment",
        action="store_true",
        help="Skip company website lookups",
    )
    parser.add_argument(
        "--allow-missing-index",
        action="store_true",
        help="Continue without the duplicate check if the job store cannot be read",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the pipeline without writing to the job store",
    )
    parser.add_argument(
        "--schedule",
        type=int,
        default=None,
        metavar="MINUTES",
        help="Run on a schedule every N minutes (e.g. --schedule 60)",
    )

    args = parser.parse_args()

    # Update settings
    if args.db_path:
        settings.db_path = args.db_path
    if args.table:
        settings.jobs_table = args.table
    if args.skip_enrichment:
        settings.skip_enrichment = True

    # Load search plan
    if not os.path.exists(args.plan):
        print(f"❌ Search plan not found: {args.plan}")
        sys.exit(1)
    if not os.path.exists(args.rules):
        print(f"❌ Exclusion rules not found: {args.rules}")
        sys.exit(1)

    search_plan = load_search_plan(args.plan)
    if not search_plan:
        print("❌ No searches found in plan file.")
        sys.exit(1)

    try:
        init_db(settings.db_path, settings.jobs_table)
    except (sqlite3.Error, ValueError) as e:
        print(f"❌ Could not initialize job store at {settings.db_path}: {e}")
        sys.exit(1)

    rules_cache = ExclusionRulesCache(
        partial(
            load_rule_set,
            args.rules,
            settings.db_path,
            boundary_max_length=settings.boundary_max_length,
            min_salary=settings.min_salary,
        )
    )

    print("=" * 60)
    print("  🍳 Culinary Job Scout")
    print("=" * 60)
    print(f"  Searches: {len(search_plan)}")
    print(f"  Store:    {settings.db_path} ({settings.jobs_table}, {get_job_count(settings.jobs_table, settings.db_path)} jobs)")
    print(f"  Enrich:   {'off' if settings.skip_enrichment else 'on'}")
    if args.dry_run:
        print(f"  Mode:     🧪 Dry run (nothing stored)")
    if args.schedule:
        print(f"  Mode:     ⏰ Scheduled every {args.schedule} min")
    print("=" * 60)
    print()

    run = partial(
        run_once,
        search_plan,
        rules_cache,
        allow_missing_index=args.allow_missing_index,
        dry_run=args.dry_run,
        output_dir=args.output_dir,
    )

    # ── Scheduled mode ───────────────────────────────────────
    if args.schedule:
        interval = args.schedule
        print(f"⏰ Starting scheduler — running every {interval} minutes")
        print(f"   Press Ctrl+C to stop.\n")

        cycle = 0
        while True:
            cycle += 1
            from datetime import datetime, timezone
            now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
            print(f"\n{'─' * 60}")
            print(f"  Cycle #{cycle} — {now}")
            print(f"{'─' * 60}\n")

            try:
                result = run()
                if not result.jobs:
                    print(f"✅ No new jobs this cycle.")
            except KeyboardInterrupt:
                raise
            except Exception as e:
                print(f"❌ Cycle #{cycle} failed: {e}")

            print(f"\n💤 Sleeping {interval} minutes until next run...")
            try:
                time.sleep(interval * 60)
            except KeyboardInterrupt:
                print("\n\n⛔ Scheduler stopped.")
                sys.exit(0)

    # ── Single run mode ──────────────────────────────────────
    else:
        try:
            result = run()
            print(f"\n✅ Done! Emitted {len(result.jobs)} jobs, {len(result.excluded_jobs)} excluded.")
        except KeyboardInterrupt:
            print("\n\n⛔ Run interrupted by user.")
            sys.exit(1)
        except (IdentityIndexUnavailable, sqlite3.Error) as e:
            print(f"\n❌ Job store unavailable: {e}")
            sys.exit(1)
        except Exception as e:
            print(f"\n❌ Fatal error: {e}")
            raise


if __name__ == "__main__":
    main()
