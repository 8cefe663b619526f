from __future__ import annotations

from typing import Any, Mapping

from .report import CampaignReport
from .timeline import excluded_from_timeline


def build_diagnostics(report: CampaignReport) -> dict[str, Any]:
    """
    Summarise data-quality gaps in a built report with suggested fixes.

    Status is "ok" when nothing was found, otherwise "degraded".
    """
    posts = report.posts
    total = len(posts)

    unpriced = sum(1 for p in posts if p.collaboration_price <= 0)
    zero_followers = sum(1 for r in report.influencers if r.followers <= 0)
    excluded = excluded_from_timeline(posts)
    no_comments = sum(1 for row in report.post_sentiment if row.total_comments <= 0)
    overridden = sum(1 for p in posts if p.override_applied)
    shapes: dict[str, int] = {}
    for p in posts:
        shapes[p.provider_shape] = shapes.get(p.provider_shape, 0) + 1

    details: dict[str, Any] = {
        "total_posts": total,
        "provider_shapes": shapes,
        "posts_without_price": unpriced,
        "influencers_without_followers": zero_followers,
        "timeline_excluded": excluded,
        "sentiment_posts": len(report.post_sentiment),
        "sentiment_posts_without_comments": no_comments,
        "posts_with_overrides": overridden,
    }

    recommendations: list[str] = []

    if total == 0:
        recommendations.append("No posts were supplied; check the content posts export for this campaign.")
    if unpriced:
        recommendations.append(
            f"{unpriced}/{total} posts have no collaboration price; CPV and CPE only cover priced posts."
        )
    if zero_followers:
        recommendations.append(
            f"{zero_followers} influencer(s) have no follower count; engagement rate treats them as 0."
        )
    if excluded["malformed_date"]:
        recommendations.append(
            f"{excluded['malformed_date']} post(s) have an unparseable publish date and are missing from the timeline."
        )
    if excluded["no_views"]:
        recommendations.append(
            f"{excluded['no_views']} post(s) report no views; they are counted as photo posts for impressions."
        )
    if report.post_sentiment and no_comments == len(report.post_sentiment):
        recommendations.append("No sentiment record carries comments; the sentiment summary defaults to neutral.")
    elif no_comments:
        recommendations.append(f"{no_comments} sentiment record(s) have no comments and carry no weight.")

    status = "degraded" if recommendations else "ok"
    if status == "ok":
        summary = f"All {total} posts carried the data every rollup needs."
    else:
        summary = f"Report built from {total} posts with {len(recommendations)} data-quality gap(s)."

    return {
        "status": status,
        "summary": summary,
        "details": details,
        "recommendations": recommendations,
    }


def format_diagnostics(diagnostics: Mapping[str, Any]) -> str:
    status = str(diagnostics.get("status") or "").strip() or "unknown"
    summary = str(diagnostics.get("summary") or "").strip() or f"Diagnostics ({status})."

    lines: list[str] = [summary]
    recs = diagnostics.get("recommendations")
    if isinstance(recs, list) and recs:
        lines.append("Recommendations:")
        for r in recs:
            t = str(r or "").strip()
            if t:
                lines.append(f"- {t}")

    return "\n".join(lines)
