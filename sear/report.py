from __future__ import annotations

"""
SEAR report generator
---------------------
This module writes a DOCX report from a finished `StormAnalysis` run.

Design goals:
- Keep SEAR usable even if report dependencies are missing (lazy imports).
- Answer the two report questions directly:
  1) which event types are most harmful to population health
     (fatalities, injuries), and
  2) which have the greatest economic consequences (property + crop damage).
- Show how much signal the category filter threw away (compliance impact),
  so the reader can judge the rankings.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import os
import tempfile

from .engine import StormAnalysis


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "NOAA National Centers for Environmental Information"
    location: str = "Asheville, NC, USA"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Storm Data export (CSV, one row per event)."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Storm Events Analytical Report"
    subtitle: str = "Health and economic impact of severe weather in the United States"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many categories to show in bar charts / tables (None -> pipeline top_n)
    top_n: Optional[int] = None

    # Non-compliant labels listed in the data-quality section
    rejected_preview: int = 10


def _fmt_money(v: float) -> str:
    """US$ with a B/M/K suffix, e.g. 1.23B."""
    for div, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(v) >= div:
            return f"{v / div:,.2f}{suffix}"
    return f"{v:,.0f}"


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    analysis: StormAnalysis,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts for a finished analysis.

    The analysis must contain at least one compliant event type.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when a report is requested.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not analysis.summaries:
        raise ValueError("No compliant event types to report on.")

    n = config.top_n or analysis.config.top_n
    top_fat = analysis.top("fatalities", n)
    top_inj = analysis.top("injuries", n)
    top_eco = analysis.top("economic_damage", n)

    # -----------------------------
    # 1) Charts
    # -----------------------------
    with tempfile.TemporaryDirectory(prefix="sear_report_") as tmpdir:
        # Each chart is: (title, file_path)
        chart_paths: List[Tuple[str, str]] = []

        def _save(filename: str) -> str:
            path = os.path.join(tmpdir, filename)
            plt.tight_layout()
            plt.savefig(path, dpi=200)
            plt.close()
            return path

        def _bar(title: str, ranking: Sequence[Tuple[str, float]], ylabel: str, filename: str) -> None:
            plt.figure()
            plt.bar([k for k, _ in ranking], [v for _, v in ranking])
            plt.xticks(rotation=45, ha="right")
            plt.title(title)
            plt.ylabel(ylabel)
            chart_paths.append((title, _save(filename)))

        _bar(f"Top {len(top_fat)} Event Types by Fatalities", top_fat, "Fatalities", "top_fatalities.png")
        _bar(f"Top {len(top_inj)} Event Types by Injuries", top_inj, "Injuries", "top_injuries.png")

        # Economic damage: property and crop stacked, so both components stay visible
        labels = [k for k, _ in top_eco]
        prop = np.array([analysis.summaries[k].property_damage for k in labels]) / 1e9
        crop = np.array([analysis.summaries[k].crop_damage for k in labels]) / 1e9
        x = np.arange(len(labels))
        plt.figure()
        plt.bar(x, prop, label="Property")
        plt.bar(x, crop, bottom=prop, label="Crop")
        plt.xticks(x, labels, rotation=45, ha="right")
        title = f"Top {len(labels)} Event Types by Economic Damage"
        plt.title(title)
        plt.ylabel("Damage (billion US$)")
        plt.legend()
        chart_paths.append((title, _save("top_economic_damage.png")))

        # -----------------------------
        # 2) Build DOCX report
        # -----------------------------
        doc = Document()

        style = doc.styles["Normal"]
        style.font.name = "Calibri"
        style.font.size = Pt(11)

        def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
            p = doc.add_paragraph()
            r = p.add_run(text)
            r.bold = bold
            r.italic = italic
            r.font.size = Pt(size)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        def _kv(key: str, value: str) -> None:
            p = doc.add_paragraph()
            r = p.add_run(f"{key}: ")
            r.bold = True
            p.add_run(value)

        def _table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
            t = doc.add_table(rows=1, cols=len(header))
            for cell, text in zip(t.rows[0].cells, header):
                cell.text = text
            for row in rows:
                cells = t.add_row().cells
                for cell, text in zip(cells, row):
                    cell.text = text

        _center_title(config.title, 22, bold=True)
        _center_title(config.subtitle, 12, italic=True)

        counts = analysis.stage_counts()
        doc.add_paragraph("")
        _kv("Records loaded", f"{counts['loaded']:,}")
        _kv("Cutoff year", str(analysis.config.cutoff_year))
        _kv("Records with impact since cutoff", f"{counts['normalized']:,}")
        _kv("Compliant / non-compliant", f"{counts['compliant']:,} / {counts['non_compliant']:,}")
        _kv("Event types ranked", str(counts["event_types"]))

        # Dataset citation section
        doc.add_paragraph("")
        doc.add_heading("Dataset citation", level=1)
        cit = config.citation
        file_name = cit.file_name or (os.path.basename(analysis.dataset_path) if analysis.dataset_path else None)
        if file_name:
            doc.add_paragraph(f"Data file used: {file_name}")
        if cit.file_note:
            doc.add_paragraph(f"File note: {cit.file_note}")
        doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.location}. {cit.website}.")

        # Processing
        doc.add_paragraph("")
        doc.add_heading("Data processing", level=1)
        for note in [
            f"Events that began before {analysis.config.cutoff_year} are excluded.",
            "Damage figures are multiplied by their scale code (H=10^2, K=10^3, M=10^6, B=10^9, "
            "digit=10, '+'=1); any other code counts as zero.",
            "Events without fatalities, injuries or damage are excluded.",
            "Event types are upper-cased, whitespace-collapsed and naively depluralized, then matched "
            f"against the {len(analysis.config.event_types)} official event types.",
        ]:
            doc.add_paragraph(note, style="List Bullet")

        # Compliance impact
        doc.add_paragraph("")
        doc.add_heading("Impact of non-compliant event types", level=1)
        doc.add_paragraph("Share of each total that comes from records whose event type is not in the vocabulary:")
        _table(
            ["Metric", "All records", "Compliant", "Excluded (%)"],
            [
                [c.metric, f"{c.full_total:,.0f}", f"{c.compliant_total:,.0f}", f"{c.excluded_pct:.2f}"]
                for c in analysis.impact()
            ],
        )
        rejected = analysis.rejected_labels(config.rejected_preview) if analysis.rejected else []
        if rejected:
            doc.add_paragraph("")
            doc.add_paragraph("Most frequent non-compliant event types:")
            _table(["Event type", "Records"], [[k, str(v)] for k, v in rejected])

        # Results
        doc.add_paragraph("")
        doc.add_heading("Results", level=1)
        for title, path in chart_paths:
            doc.add_paragraph(title)
            doc.add_picture(path, width=Inches(6.5))
            doc.add_paragraph("")

        doc.add_heading("Population health", level=2)
        _table(
            ["Event type", "Fatalities", "Injuries"],
            [[k, f"{int(v):,}", f"{analysis.summaries[k].injuries:,}"] for k, v in top_fat],
        )
        doc.add_paragraph("")
        doc.add_heading("Economic consequences", level=2)
        _table(
            ["Event type", "Property (US$)", "Crop (US$)", "Total (US$)"],
            [
                [k, _fmt_money(analysis.summaries[k].property_damage),
                 _fmt_money(analysis.summaries[k].crop_damage), _fmt_money(v)]
                for k, v in top_eco
            ],
        )

        # -----------------------------
        # Reproducibility footer
        # -----------------------------
        doc.add_paragraph("")
        doc.add_heading("Reproducibility footer", level=1)

        from . import __version__ as sear_version
        from datetime import datetime as _dt
        generated_at = _dt.now().isoformat(timespec="seconds")

        doc.add_paragraph(f"SEAR version: {sear_version}")
        doc.add_paragraph(f"Report generated at: {generated_at}")
        doc.add_paragraph(f"Top-N size: {n}")

        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        doc.save(out_path)
    return out_path
