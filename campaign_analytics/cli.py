from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from .config import load_config
from .diagnostics import build_diagnostics, format_diagnostics
from .errors import ConfigError, InputError, ReportError
from .event_log import EventLogger
from .inputs import load_records
from .report import CampaignReport, build_campaign_report, report_to_dict


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="campaign-analytics")

    subparsers = parser.add_subparsers(dest="command", required=True)

    dry = subparsers.add_parser(
        "dry-run",
        help="Build a report from the bundled offline sample and print a summary.",
    )
    dry.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file (defaults apply when omitted).",
    )
    dry.set_defaults(_handler=_cmd_dry_run)

    report = subparsers.add_parser(
        "report",
        help="Build a campaign analytics report from exported JSON records.",
    )
    report.add_argument("--posts", required=True, help="JSON file of raw content post records.")
    report.add_argument("--sentiment", default=None, help="JSON file of per-post sentiment records.")
    report.add_argument(
        "--influencers",
        default=None,
        help="JSON file of campaign influencer records (YouTube subscriber lookup).",
    )
    report.add_argument("--overrides", default=None, help="JSON file of manually edited post metrics.")
    report.add_argument("--config", default=None, help="Path to YAML config file.")
    report.add_argument("--campaign-id", default=None, help="Campaign id recorded in the report and log.")
    report.add_argument("--out", default=None, help="Write the report JSON here instead of stdout.")
    report.add_argument("--log", default=None, help="Write the JSONL event log here.")
    report.set_defaults(_handler=_cmd_report)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _summary_lines(report: CampaignReport) -> list[str]:
    c = report.campaign
    s = report.sentiment
    return [
        f"campaign_id={report.campaign_id or ''}",
        f"total_posts={c.total_posts}",
        f"total_influencers={c.total_influencers}",
        f"total_views={c.total_views}",
        f"total_followers={c.total_followers}",
        f"average_engagement_rate={c.average_engagement_rate:.2f}",
        f"cost_per_view={c.cost_per_view:.4f}",
        f"cost_per_engagement={c.cost_per_engagement:.4f}",
        f"estimated_impressions={c.estimated_impressions}",
        f"estimated_reach={c.estimated_reach}",
        f"timeline_days={len(report.timeline)}",
        f"sentiment_dominant={s.dominant}",
        f"sentiment_trend={s.trend}",
        f"sentiment_score={report.sentiment_score}",
        f"insights={len(report.insights)}",
    ]


def _cmd_dry_run(args: argparse.Namespace) -> int:
    from .offline import OfflineSample

    cfg = load_config(args.config)
    sample = OfflineSample()

    with EventLogger(stream=sys.stderr, campaign_id=sample.campaign_id) as log:
        report = build_campaign_report(
            sample.posts,
            sample.sentiment,
            influencers=sample.influencers,
            overrides=sample.overrides,
            config=cfg,
            logger=log,
            campaign_id=sample.campaign_id,
        )

    for line in _summary_lines(report):
        print(line)
    print(format_diagnostics(build_diagnostics(report)))

    return 0


def _optional_records(path: str | None, key: str) -> list[dict[str, Any]] | None:
    if path is None:
        return None
    return load_records(path, key)


def _write_report(payload: dict[str, Any], out: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)
    if out is None:
        print(text)
        return

    out_path = Path(out)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Failed to write report: {out_path}") from e


def _cmd_report(args: argparse.Namespace) -> int:
    if args.log:
        log = EventLogger.open(args.log, overwrite=True, campaign_id=args.campaign_id)
    else:
        log = EventLogger(stream=sys.stderr, campaign_id=args.campaign_id)

    with log:
        log.info(
            "report_command_started",
            posts_path=str(args.posts),
            sentiment_path=str(args.sentiment or ""),
            config_path=str(args.config or ""),
        )

        try:
            cfg = load_config(args.config)
            posts = load_records(args.posts, "data")
            sentiment = _optional_records(args.sentiment, "data") or []
            influencers = _optional_records(args.influencers, "influencers")
            overrides = _optional_records(args.overrides, "overrides")

            report = build_campaign_report(
                posts,
                sentiment,
                influencers=influencers,
                overrides=overrides,
                config=cfg,
                logger=log,
                campaign_id=args.campaign_id,
            )

            payload = report_to_dict(report)
            payload["diagnostics"] = build_diagnostics(report)
            _write_report(payload, args.out)

            if args.out:
                for line in _summary_lines(report):
                    print(line)
                print(f"report_json={args.out}")

            return 0
        except Exception as e:
            log.exception("report_command_failed", exc=e)
            raise


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except (InputError, ReportError) as e:
        _eprint(str(e))
        return 3
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
