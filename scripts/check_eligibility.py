"""
scripts/check_eligibility.py — CLI to test a member against distribution rules.

Usage:
    python scripts/check_eligibility.py snapshot.json --payment 700000 --test-passed
    python scripts/check_eligibility.py snapshot.json --payment 0 --trace
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from leadgrade.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("check_eligibility")

from leadgrade.models import MemberSnapshot
from leadgrade.services.eligibility import evaluate_grade_eligibility
from leadgrade.services.thresholds import eligible_grades, format_payment_amount, quick_eligibility
from leadgrade.snapshot import load_snapshot


def run(snapshot_path: str, member: MemberSnapshot, show_trace: bool) -> None:
    snapshot = load_snapshot(snapshot_path)
    thresholds = snapshot.effective_thresholds()

    print("\n" + "="*55)
    print("  Lead Distribution — Eligibility Check")
    print("="*55)
    print(f"\n  Monthly payment : {format_payment_amount(member.monthly_payment)}")
    print(f"  Newbie test     : {'passed' if member.test_passed else 'not passed'}")

    quick = quick_eligibility(member.monthly_payment, member.test_passed, thresholds)
    print(f"  Quick eligible  : {', '.join(eligible_grades(quick))}\n")

    report = evaluate_grade_eligibility(member, snapshot.grades, snapshot.distribution_rules, thresholds)
    for row in report:
        mark = "eligible" if row.is_eligible else "not eligible"
        print(f"  [{row.grade_name}] {mark:<13} {row.reason}")
        if show_trace and row.result is not None:
            print("\n".join("      " + line for line in row.result.trace.render().splitlines()))

    logger.info("Checked %d grade(s) for eligibility.", len(report))
    print("\n" + "="*55 + "\n")


def main():
    parser = argparse.ArgumentParser(description="Check which grades a member may receive.")
    parser.add_argument("snapshot", help="JSON file with grades and distribution_rules")
    parser.add_argument("--payment", type=float, default=0, help="Previous-month monthly payment")
    parser.add_argument("--test-passed", action="store_true", help="Member passed the newbie test")
    parser.add_argument("--commission", type=float, default=0, help="Previous-month commission")
    parser.add_argument("--contracts", type=int, default=0, help="Previous-month contract count")
    parser.add_argument("--trace", action="store_true", help="Print the decision log per grade")
    args = parser.parse_args()

    member = MemberSnapshot(
        test_passed=args.test_passed,
        monthly_payment=args.payment,
        commission=args.commission,
        contract_count=args.contracts,
    )
    run(args.snapshot, member, args.trace)


if __name__ == "__main__":
    main()
