"""
scripts/classify_leads.py — CLI to grade leads against a rule snapshot.

Usage:
    python scripts/classify_leads.py snapshot.json leads.json
    python scripts/classify_leads.py snapshot.json leads.json --mode all
    python scripts/classify_leads.py snapshot.json leads.json --trace   # print every decision log
"""

import sys
import os
import argparse
import json
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from leadgrade.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("classify_leads")

from leadgrade.errors import GradeConfigurationError
from leadgrade.services.reclassify import classify_leads, reclassify
from leadgrade.snapshot import load_snapshot


def run(snapshot_path: str, leads_path: str, mode: str, show_trace: bool) -> int:
    print("\n" + "="*55)
    print("  Lead Grading — Reclassification Sweep")
    print("="*55)

    # ── Step 1: Load ──────────────────────────────────────────
    print(f"\n[1/3] Loading rule snapshot from {snapshot_path}...")
    snapshot = load_snapshot(snapshot_path)
    rules_by_grade = snapshot.rules_by_grade()
    print(f"      {len(snapshot.grades)} grades, {len(snapshot.grade_rules)} rules.")

    with open(leads_path, encoding="utf-8") as fh:
        leads = json.load(fh)
    print(f"      {len(leads)} leads loaded from {leads_path}.")

    # ── Step 2: Classify ──────────────────────────────────────
    print(f"\n[2/3] Classifying (mode={mode})...")
    try:
        summary = reclassify(leads, snapshot.grades, rules_by_grade, mode=mode)
    except GradeConfigurationError as e:
        logger.error("Rule configuration is invalid: %s", e)
        print(f"      Configuration error: {e}")
        return 1

    for grade_name, count in sorted(summary.grade_summary.items()):
        print(f"      {grade_name}: {count}")
    for update in summary.updates:
        print(f"      lead {update.lead_id}: {update.previous_grade_id} -> {update.grade_id}")

    # ── Step 3: Trace ─────────────────────────────────────────
    if show_trace:
        print("\n[3/3] Decision logs:")
        for lead, result in zip(leads, classify_leads(leads, snapshot.grades, rules_by_grade)):
            print(f"\n  lead {lead.get('id')} -> {result.grade_name}")
            print(result.trace.render())
    else:
        print("\n[3/3] Skipping decision logs (use --trace to print them).")

    print("\n" + "="*55)
    print(f"  {summary.message}")
    print("="*55 + "\n")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Grade leads against a rule snapshot.")
    parser.add_argument("snapshot", help="JSON file with grades and grade_rules")
    parser.add_argument("leads", help="JSON file with a list of lead field maps")
    parser.add_argument(
        "--mode", choices=["all", "auto_only"], default=settings.reclassify_default_mode,
        help="Reclassify every lead, or only automatically graded ones (default from .env)",
    )
    parser.add_argument("--trace", action="store_true", help="Print the decision log of every lead")
    args = parser.parse_args()
    sys.exit(run(args.snapshot, args.leads, args.mode, args.trace))


if __name__ == "__main__":
    main()
