"""
Command-line interface for compliance-scoring.

Scores assessment results and classifies evidence documents from the
shell, using the same engine the platform services embed.

Usage:
    compliance-scoring score assessment.json            # Score gaps and risks
    compliance-scoring score assessment.json --json     # Machine-readable output
    compliance-scoring classify evidence/*             # Classify documents
    compliance-scoring classify report.csv --heuristic-only
    compliance-scoring classify evidence/* --metrics   # Expose Prometheus metrics
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from compliance_scoring.observability.logging import bound_context, get_logger, setup_logging
from compliance_scoring.observability.metrics import get_metrics

logger = get_logger(__name__)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Compliance Scoring - risk scores and evidence tiers."""
    setup_logging(level="DEBUG" if debug else None)


def _start_metrics_server(enabled: bool) -> None:
    if enabled:
        get_metrics().start_server()


def _load_assessment(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a JSON object")
    return data


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--history",
    default=None,
    help="Comma-separated previous overall scores, oldest first (overrides file)",
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--metrics/--no-metrics", default=False, help="Expose Prometheus metrics while running")
def score(input_file: Path, history: str | None, as_json: bool, metrics: bool) -> None:
    """Score an assessment's gaps and risks.

    INPUT_FILE is a JSON object with "gaps" and "risks" lists, and optional
    "weights" and "previous_scores".
    """
    from compliance_scoring.scoring import (
        ComplianceGap,
        RiskItem,
        ScoreCalculator,
        ScoringWeights,
    )

    data = _load_assessment(input_file)
    try:
        gaps = [ComplianceGap.model_validate(g) for g in data.get("gaps", [])]
        risks = [RiskItem.model_validate(r) for r in data.get("risks", [])]
        weights = (
            ScoringWeights.model_validate(data["weights"]) if data.get("weights") else None
        )
    except ValidationError as e:
        click.echo(click.style(f"Invalid assessment data:\n{e}", fg="red"), err=True)
        sys.exit(2)

    try:
        if history is not None:
            previous = [float(s) for s in history.split(",") if s.strip()]
        else:
            previous = [float(s) for s in data.get("previous_scores", [])]
    except (TypeError, ValueError) as e:
        raise click.BadParameter(f"previous scores must be numbers: {e}") from e

    _start_metrics_server(metrics)

    with bound_context(assessment=input_file.name):
        calculator = ScoreCalculator()
        breakdown = calculator.calculate_breakdown(gaps, risks, weights)
        insights = calculator.generate_scoring_insights(
            breakdown.overall, breakdown.by_category, gaps, risks,
        )
        trend = calculator.calculate_trend(breakdown.overall, previous)
        risk_level = calculator.get_risk_level_from_score(breakdown.overall)
        get_metrics().record_score(insights.level)
        logger.info(
            "Assessment scored",
            overall=breakdown.overall,
            risk_level=risk_level.value,
            gaps=len(gaps),
            risks=len(risks),
        )

    if as_json:
        click.echo(json.dumps(
            {
                "breakdown": breakdown.model_dump(mode="json"),
                "risk_level": risk_level.value,
                "trend": trend.model_dump(mode="json"),
                "insights": insights.model_dump(mode="json"),
            },
            indent=2,
        ))
        return

    click.echo(f"\nOverall score: {breakdown.overall}/100 ({insights.level})")
    click.echo(f"Risk level: {risk_level.value}")
    click.echo(f"Composite risk index: {breakdown.composite_index}")
    click.echo("\nCategory scores:")
    click.echo("-" * 40)
    for category, value in breakdown.by_category.items():
        click.echo(f"  {category.value:<14} {value:>3}")
    click.echo("-" * 40)
    click.echo(
        f"\nTrend: {trend.direction} ({trend.change_rate}% change, "
        f"confidence {trend.confidence})"
    )
    click.echo(f"\n{insights.summary}")
    for heading, items in (
        ("Strengths", insights.strengths),
        ("Weaknesses", insights.weaknesses),
        ("Priorities", insights.priorities),
    ):
        click.echo(f"\n{heading}:")
        for item in items:
            click.echo(f"  - {item}")


TIER_COLORS = {"TIER_2": "green", "TIER_1": "yellow", "TIER_0": "red"}


@main.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--heuristic-only", is_flag=True, help="Skip the AI classifier")
@click.option("--timeout", default=None, type=float, help="Per-document deadline in seconds")
@click.option("--concurrency", default=None, type=int, help="Documents classified in parallel")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--metrics/--no-metrics", default=False, help="Expose Prometheus metrics while running")
def classify(
    files: tuple[Path, ...],
    heuristic_only: bool,
    timeout: float | None,
    concurrency: int | None,
    as_json: bool,
    metrics: bool,
) -> None:
    """Classify evidence documents into trust tiers."""
    from compliance_scoring.evidence import (
        DocumentDescriptor,
        InMemoryDocumentStore,
        LocalContentFetcher,
        build_classifier,
    )

    store = InMemoryDocumentStore([
        DocumentDescriptor(id=str(path), filename=path.name, content_locator=str(path))
        for path in files
    ])

    async def run():
        classifier = build_classifier(
            store, LocalContentFetcher(), heuristic_only=heuristic_only,
        )
        try:
            results = await classifier.classify_documents(
                [str(path) for path in files],
                concurrency=concurrency,
                timeout=timeout,
            )
            return results, classifier.get_stats()
        finally:
            await classifier.close()

    _start_metrics_server(metrics)
    results, stats = asyncio.run(run())
    logger.info(
        "Classification run complete",
        documents=len(files),
        strategy=stats["strategy"],
        fallbacks=stats["fallbacks"],
    )

    if as_json:
        click.echo(json.dumps(
            {
                "results": {
                    str(path): result.model_dump(mode="json")
                    for path, result in zip(files, results)
                },
                "stats": stats,
            },
            indent=2,
        ))
        return

    click.echo("\nClassification Results:")
    click.echo("-" * 60)
    for path, result in zip(files, results):
        tier = result.tier.value
        click.echo(click.style(
            f"  {tier}  {result.confidence:.2f}  {path.name}",
            fg=TIER_COLORS.get(tier),
        ))
        click.echo(f"      {result.reason}")
    click.echo("-" * 60)
    click.echo(
        f"  strategy: {stats['strategy']}  ai: {stats['ai_classified']}  "
        f"heuristic: {stats['heuristic_classified']}  fallbacks: {stats['fallbacks']}"
    )


if __name__ == "__main__":
    main()
