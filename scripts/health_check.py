#!/usr/bin/env python3
"""Foresight prediction document health check."""

import os
import sys

# Add project to path
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from config.settings import DATA_BASE_URL, FETCH_TIMEOUT_SECONDS, LOGS_DIR, PRIMARY_DOCUMENT, SUMMARY_DOCUMENT
from core import derive, fields
from core.adapters import UnsupportedDocumentError, adapt_prediction_document, adapt_summary_document
from core.formatting import format_percentage, prediction_day
from core.loader import DocumentFetchError, fetch_text, resolve_document_url
from core.sanitizer import DocumentParseError, parse_document_text
from ui.widgets import success_rate_label


def check_prediction_document(base_url=DATA_BASE_URL):
    """Fetch, parse and adapt the primary prediction document."""
    print("\n📊 Prediction Document Report")
    print("=" * 70)

    location = resolve_document_url(base_url, PRIMARY_DOCUMENT)
    print(f"  Source: {location}")

    try:
        document = adapt_prediction_document(parse_document_text(fetch_text(location, FETCH_TIMEOUT_SECONDS)))
    except (DocumentFetchError, DocumentParseError, UnsupportedDocumentError) as e:
        print(f"  ✗ {e}")
        return False

    print(f"  Version:          {document.version}")
    print(f"  Prediction date:  {prediction_day(document.metadata)}")
    print(f"  Tickers:          {len(document.stocks)}")

    incomplete = []
    for ticker, record in document.stocks.items():
        missing = [
            name
            for name, value in [
                ("7d expected return", record.horizons.get("7d") and record.horizons["7d"].expected_return),
                ("volatility", record.risk_metrics.volatility_7d),
                ("composite score", record.selection_scores.composite_score),
            ]
            if fields.is_missing(value)
        ]
        if missing:
            incomplete.append((ticker, missing))

    averages = derive.market_averages(document)
    print(f"  Avg 7d expected:  {format_percentage(averages.expected_return)}")
    print(f"  Avg volatility:   {format_percentage(averages.volatility, 4)}")

    if incomplete:
        print(f"\n⚠ Tickers with defaulted fields ({len(incomplete)}):")
        for ticker, missing in incomplete:
            print(f"    - {ticker}: {', '.join(missing)}")

    return bool(document.stocks)


def check_summary_document(base_url=DATA_BASE_URL):
    """Fetch, parse and adapt the optional summary document."""
    print("\n🎯 Summary Document Report")
    print("=" * 70)

    if not SUMMARY_DOCUMENT:
        print("  ✓ No summary document configured.")
        return True

    location = resolve_document_url(base_url, SUMMARY_DOCUMENT)
    print(f"  Source: {location}")

    try:
        summary = adapt_summary_document(parse_document_text(fetch_text(location, FETCH_TIMEOUT_SECONDS)))
    except (DocumentFetchError, DocumentParseError, UnsupportedDocumentError) as e:
        print(f"  ✗ {e}")
        return False

    rate = derive.success_rate(summary)
    print(f"  Recommendations:  {len(summary.top_recommendations)}")
    print(f"  Avoid list:       {len(summary.avoid_list)}")
    print(f"  Success rate:     {success_rate_label(rate)}")
    return True


def check_logs():
    """Check recent log entries for errors."""
    print("\n📋 Recent Log Entries (last 10)")
    print("=" * 70)

    log_file = os.path.join(LOGS_DIR, "ui.log")
    if not os.path.exists(log_file):
        print("  No log file found yet.")
        return True

    with open(log_file, "r", encoding="utf-8") as f:
        lines = f.readlines()[-10:]
    for line in lines:
        print(f"  {line.rstrip()}")

    return not any("| ERROR |" in line for line in lines)


def main():
    """Run all checks."""
    print("\n" + "=" * 70)
    print("  Foresight Health Check")
    print("=" * 70)

    checks = [
        ("Prediction Document", check_prediction_document),
        ("Summary Document", check_summary_document),
        ("Log Health", check_logs),
    ]

    all_pass = True
    for name, check_func in checks:
        try:
            if not check_func():
                all_pass = False
        except OSError as e:
            print(f"\n❌ {name} check failed: {e}")
            all_pass = False

    print("\n" + "=" * 70)
    if all_pass:
        print("✓ All checks passed. Foresight data is healthy!")
    else:
        print("⚠ Some checks failed. Review above for details.")
    print("=" * 70 + "\n")

    return 0 if all_pass else 1


if __name__ == "__main__":
    sys.exit(main())
