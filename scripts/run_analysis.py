#!/usr/bin/env python
"""
Run item analysis and integrity flagging over JSON exam snapshots.

    python scripts/run_analysis.py analyze variants.json responses.json
    python scripts/run_analysis.py flag analysis.json variant_sim.json response_sim.json
"""

import json
from datetime import datetime
from pathlib import Path

import pandas as pd
import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from exam_analysis.analysis import (
    AnalysisConfig,
    AnalysisError,
    BiPointAnalysisResult,
    analyze_exam,
)
from exam_analysis.analysis.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_MIN_SAMPLE_SIZE,
)
from exam_analysis.core.data_models import ExamVariant, StudentResponse
from exam_analysis.detection import (
    FlaggedSubmission,
    FlaggingConfig,
    ModelConfig,
    filter_by_probability,
    get_flagging_summary,
    process_submissions,
)

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "reports"
DEFAULT_MIN_PROBABILITY = 0.5
DEFAULT_TOP_N = 25

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def read_json(path: Path) -> object:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    with open(path) as f:
        return json.load(f)


def parse_json(path: Path, adapter: TypeAdapter) -> object:  # type: ignore[type-arg]
    data = read_json(path)
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        console.print(f"[red]Invalid data in {path}:[/red]\n{e}")
        raise typer.Exit(1) from e


def print_question_table(result: BiPointAnalysisResult) -> None:
    table = Table(title="Item Statistics")
    table.add_column("Question", style="bold")
    table.add_column("N", justify="right")
    table.add_column("Difficulty", justify="right")
    table.add_column("Discrimination", justify="right")
    table.add_column("Point-biserial", justify="right")
    table.add_column("Chi-square", justify="right")
    table.add_column("Significant", justify="center")

    for q in result.question_results:
        sig = q.statistical_significance
        table.add_row(
            q.question_id,
            str(q.total_responses),
            f"{q.difficulty_index:.3f}",
            f"{q.discrimination_index:.3f}",
            f"{q.point_biserial_correlation:.3f}",
            f"{sig.test_statistic:.2f}",
            "[green]yes[/green]" if sig.is_significant else "no",
        )

    console.print(table)


def print_summary(result: BiPointAnalysisResult) -> None:
    summary = result.summary
    dist = summary.score_distribution
    reliability = (
        f"{summary.reliability.cronbachs_alpha:.3f} "
        f"({summary.reliability.interpretation})"
        if summary.reliability
        else "-"
    )
    console.print(
        Panel(
            f"Students analyzed: [cyan]{result.metadata.sample_size}[/cyan] "
            f"(excluded {result.metadata.excluded_students})\n"
            f"Mean difficulty: [cyan]{summary.average_difficulty:.3f}[/cyan]\n"
            f"Mean discrimination: [cyan]{summary.average_discrimination:.3f}[/cyan]\n"
            f"Mean point-biserial: [cyan]{summary.average_point_biserial:.3f}[/cyan]\n"
            f"Mean score: [cyan]{dist.mean:.1%}[/cyan] "
            f"(sd {dist.standard_deviation:.1%})\n"
            f"Cronbach's alpha: [cyan]{reliability}[/cyan]",
            title=result.exam_title or "Exam Summary",
        )
    )
    for failure in result.metadata.failed_questions:
        console.print(
            f"[yellow]Skipped {failure.question_id}: {failure.reason}[/yellow]"
        )


def print_flagged_table(flagged: list[FlaggedSubmission], top_n: int) -> None:
    table = Table(title="Flagged Pairs")
    table.add_column("Student 1", style="bold")
    table.add_column("Student 2", style="bold")
    table.add_column("Probability", justify="right")
    table.add_column("Response sim.", justify="right")
    table.add_column("Variant sim.", justify="right")
    table.add_column("Scores", justify="right")

    def fmt(value: float | None, spec: str = ".3f") -> str:
        return format(value, spec) if value is not None else "-"

    for f in flagged[:top_n]:
        table.add_row(
            f.student1,
            f.student2,
            fmt(f.probability),
            fmt(f.response_similarity),
            fmt(f.variant_similarity),
            f"{fmt(f.student1_score, '.1f')} / {fmt(f.student2_score, '.1f')}",
        )

    console.print(table)


def save_flagged_csv(
    output_dir: Path, flagged: list[FlaggedSubmission]
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = output_dir / f"{timestamp}_flagged_pairs.csv"
    df = pd.DataFrame([f.model_dump(exclude={"warnings"}) for f in flagged])
    df.to_csv(path, index=False)
    return path


@app.command()
def analyze(
    variants_path: Path = typer.Argument(
        ..., help="JSON list of exam variants"
    ),
    responses_path: Path = typer.Argument(
        ..., help="JSON list of student responses"
    ),
    min_sample_size: int = typer.Option(
        DEFAULT_MIN_SAMPLE_SIZE, help="Minimum eligible students"
    ),
    confidence_level: float = typer.Option(
        DEFAULT_CONFIDENCE_LEVEL, help="Chi-square confidence level"
    ),
    exclude_incomplete: bool = typer.Option(
        False, help="Drop incomplete submissions"
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR, help="Directory for the JSON result"
    ),
) -> None:
    """Compute item statistics for an exam and save the result as JSON."""
    variants = parse_json(variants_path, TypeAdapter(list[ExamVariant]))
    responses = parse_json(responses_path, TypeAdapter(list[StudentResponse]))
    assert isinstance(variants, list) and isinstance(responses, list)

    config = AnalysisConfig(
        min_sample_size=min_sample_size,
        confidence_level=confidence_level,
        exclude_incomplete_data=exclude_incomplete,
    )
    try:
        result = analyze_exam(variants, responses, config)
    except AnalysisError as e:
        console.print(f"[red]Analysis failed: {e}[/red]")
        raise typer.Exit(1) from e

    print_summary(result)
    print_question_table(result)

    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = output_dir / f"{timestamp}_analysis.json"
    path.write_text(result.model_dump_json(indent=2))
    console.print(f"Result saved: [cyan]{path}[/cyan]")


@app.command()
def flag(
    analysis_path: Path = typer.Argument(
        ..., help="JSON result written by the analyze command"
    ),
    variant_similarity_path: Path = typer.Argument(
        ..., help="JSON variant similarity matrix"
    ),
    response_similarity_path: Path = typer.Argument(
        ..., help="JSON response similarity matrix"
    ),
    min_probability: float = typer.Option(
        DEFAULT_MIN_PROBABILITY, help="Only report pairs at or above this"
    ),
    invert_variant_similarity: bool = typer.Option(
        False, help="Score with 1 - variant similarity"
    ),
    top_n: int = typer.Option(DEFAULT_TOP_N, help="Rows to display"),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR, help="Directory for the CSV export"
    ),
) -> None:
    """Score student pairs for probable answer sharing."""
    result = parse_json(analysis_path, TypeAdapter(BiPointAnalysisResult))
    assert isinstance(result, BiPointAnalysisResult)
    matrix_adapter = TypeAdapter(dict[str, dict[str, float]])
    variant_similarity = parse_json(variant_similarity_path, matrix_adapter)
    response_similarity = parse_json(response_similarity_path, matrix_adapter)
    assert isinstance(variant_similarity, dict)
    assert isinstance(response_similarity, dict)

    if not result.variant_results:
        console.print(
            "[yellow]Analysis has no per-variant results; "
            "every pair will score 0[/yellow]"
        )

    flagged = process_submissions(
        variant_similarity,
        response_similarity,
        result,
        list(result.variant_results or ()),
        FlaggingConfig(),
        ModelConfig(invert_variant_similarity=invert_variant_similarity),
    )
    flagged = filter_by_probability(flagged, min_probability)
    summary = get_flagging_summary(flagged)

    console.print(
        Panel(
            f"Pairs flagged: [cyan]{summary.total_flagged}[/cyan]\n"
            f"Students involved: [cyan]{summary.unique_students_involved}[/cyan]\n"
            f"Mean probability: [cyan]{summary.average_probability:.3f}[/cyan]\n"
            f"Mean response similarity: [cyan]{summary.average_similarity:.3f}[/cyan]",
            title="Integrity Flagging",
        )
    )
    if not flagged:
        console.print("[green]No pairs flagged.[/green]")
        return

    print_flagged_table(flagged, top_n)
    path = save_flagged_csv(output_dir, flagged)
    console.print(f"CSV saved: [cyan]{path}[/cyan]")


if __name__ == "__main__":
    app()
