#!/usr/bin/env python3
"""
Report how well docs/test_scenarios_business_summary.md covers the
commission scenarios in tests/test_integration_scenarios.py.

Exits with status 1 when a scenario class or method has no business
explanation; scenarios described in the summary but no longer tested are
reported as warnings.

Run: python scripts/validate_test_docs_sync.py
"""

import re
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
SCENARIO_FILE = PROJECT_ROOT / 'tests' / 'test_integration_scenarios.py'
SUMMARY_FILE = PROJECT_ROOT / 'docs' / 'test_scenarios_business_summary.md'


def scenario_tests(path: Path) -> dict[str, list[str]]:
    """Map each scenario class to its test methods, in file order."""
    scenarios: dict[str, list[str]] = {}
    current = None
    for line in path.read_text().splitlines():
        class_match = re.match(r'^class (Test\w+)', line)
        if class_match:
            current = class_match.group(1)
            scenarios[current] = []
        elif current:
            method_match = re.match(r'^\s+def (test_\w+)', line)
            if method_match:
                scenarios[current].append(method_match.group(1))
    return scenarios


def documented_tests(path: Path) -> tuple[set[str], set[str]]:
    """Class and method names referenced by the business summary, e.g.
    **Test Class**: `TestVolumeBonus` / **Test Method**: `test_repeat_customer_counts_once`."""
    content = path.read_text()
    classes = set(re.findall(r'\*\*Test Class\*\*:\s*`(Test\w+)`', content))
    methods = set(re.findall(r'\*\*Test Method\*\*:\s*`(test_\w+)`', content))
    return classes, methods


def main() -> int:
    for path in (SCENARIO_FILE, SUMMARY_FILE):
        if not path.exists():
            print(f"❌ File not found: {path}")
            return 1

    scenarios = scenario_tests(SCENARIO_FILE)
    doc_classes, doc_methods = documented_tests(SUMMARY_FILE)
    methods = {m for names in scenarios.values() for m in names}

    errors = sorted(
        [f"Missing class documentation: {c}" for c in set(scenarios) - doc_classes]
        + [f"Missing method documentation: {m}" for m in methods - doc_methods]
    )
    warnings = sorted(
        [f"Documented class no longer exists: {c}" for c in doc_classes - set(scenarios)]
        + [f"Documented method no longer exists: {m}" for m in doc_methods - methods]
    )

    print("=" * 60)
    print("Commission Scenario Documentation Check")
    print("=" * 60)
    print(f"\nScenario classes: {len(scenarios)} ({len(doc_classes)} documented)")
    print(f"Scenario methods: {len(methods)} ({len(doc_methods)} documented)")

    if errors:
        print(f"\n❌ ERRORS ({len(errors)}):")
        for error in errors:
            print(f"   - {error}")

    if warnings:
        print(f"\n⚠️  WARNINGS ({len(warnings)}):")
        for warning in warnings:
            print(f"   - {warning}")

    if not errors and not warnings:
        print("\n✅ Every scenario has a business explanation.")

    print("\nCoverage by scenario:")
    for cls, names in scenarios.items():
        print(f"\n  {'✅' if cls in doc_classes else '❌'} {cls}")
        for name in names:
            print(f"      {'✅' if name in doc_methods else '❌'} {name}")

    return 1 if errors else 0


if __name__ == '__main__':
    sys.exit(main())
