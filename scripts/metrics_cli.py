#!/usr/bin/env python3
"""AlarmOne metrics CLI — the dashboard numbers without the browser.

Usage:
  python scripts/metrics_cli.py report [range]          # Print KPI report to stdout
  python scripts/metrics_cli.py export [range] [path]   # Write metrics JSON (default static/metrics.json)

range is any token GET /metrics accepts: 24h, today, week, month or a number of days.
"""
import asyncio
import json
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import settings
from src.logging_config import setup_logging
from src.analytics.dashboard import build_dashboard
from src.analytics.windows import local_timezone, resolve_window
from src.umami.client import UmamiClient
from src.umami.errors import UmamiError

DEFAULT_EXPORT = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "static", "metrics.json",
)


async def gather_metrics(range_token: str) -> dict:
    tz = local_timezone(settings.DASHBOARD_TIMEZONE)
    window = resolve_window(range_token, tz=tz)
    client = UmamiClient.from_settings()
    try:
        dashboard = await build_dashboard(
            client, window, range_token, tz=tz, locale=settings.DASHBOARD_LOCALE,
        )
    finally:
        await client.close()
    return dashboard.model_dump(by_alias=True)


def format_report(m: dict) -> str:
    s = m["summary"]
    funnel = s["purchaseFunnel"]
    onboarding = s["onboarding"]
    purchases = s["purchases"]
    lines = [
        "=" * 60,
        f"  AlarmOne Metrics — {m['range']['label']}",
        "=" * 60,
        "",
        "  👥 Users",
        f"     New: {s['newUsers']:>8,} ({s['newUsersChange']:+d}%)    Active: {s['activeUsers']:>8,}",
        f"     Visitors: {s['visitors']:>8,} ({s['visitorChange']:+d}%)    Launches: {s['appLaunches']:>8,}",
        f"     Pageviews: {s['pageviews']:,}  |  Bounce rate: {s['bounceRate']}%  |  Avg visit: {s['avgTime']}s",
        "",
        "  💰 Purchases",
        f"     Total: {purchases['total']:,}  (annual {purchases['annual']}, lifetime {purchases['lifetime']}, "
        f"monthly {purchases['monthly']}, unknown {purchases['unknown']})",
        f"     Clicks → success: {funnel['clicks']:,} → {funnel['success']:,}  ({funnel['conversionRate']}%)",
        f"     Failed: {funnel['failed']:,}  |  Cancelled: {funnel['cancel']:,}",
        "",
        "  🚀 Onboarding",
        f"     Shown: {onboarding['appear']:,}  Skipped: {onboarding['skip']:,}  "
        f"Completed: {onboarding['complete']:,}  ({onboarding['completionRate']}%)",
        "",
        "  ⏰ Alarms",
        f"     Added: {s['alarmsAdded']:,}  Edited: {s['alarmsEdited']:,}  Deleted: {s['alarmsDeleted']:,}",
        "",
        "  📈 New users by day",
    ]
    series = m["charts"]["newUsers"]
    max_val = max((b["count"] for b in series), default=0) or 1
    for bucket in series:
        bar_len = int(bucket["count"] / max_val * 30)
        lines.append(f"     {bucket['date']}  {'█' * bar_len} {bucket['count']:,}")
    lines += ["", "=" * 60]
    return "\n".join(lines)


async def cmd_report(range_token: str = "7"):
    m = await gather_metrics(range_token)
    print(format_report(m))


async def cmd_export(range_token: str = "7", out: str = DEFAULT_EXPORT):
    m = await gather_metrics(range_token)
    os.makedirs(os.path.dirname(os.path.abspath(out)), exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(m, f, indent=2, ensure_ascii=False)
    print(f"✅ Metrics exported to {out}")


COMMANDS = {
    "report": cmd_report,
    "export": cmd_export,
}


def main(argv: list[str]) -> int:
    if len(argv) < 2 or argv[1] not in COMMANDS:
        print(__doc__)
        return 1
    setup_logging()
    try:
        asyncio.run(COMMANDS[argv[1]](*argv[2:]))
    except UmamiError as e:
        print(f"❌ Failed to fetch Umami data ({e.kind}): {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
