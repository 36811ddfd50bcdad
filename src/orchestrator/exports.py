"""
src/orchestrator/exports.py — report a finished run as text, JSON, CSV or PDF.

Provides:
- render_summary(result): the plain-text "function call summary"
- export_json(result, path): full run (stop reason, answer, transcript, ledger)
- export_csv(entries, path): one row per ledger entry
- export_ledger_pdf(result, path): one-page run report (ReportLab)

Nothing here feeds back into a run; the ledger is read, never written.
"""


import csv
import json
from typing import Any, Dict, List, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.lib.utils import simpleSplit

from config import format_duration
from orchestrator.models import RunResult, ToolCallOutcome


RULE = "=" * 60
CSV_FIELDS = ["index", "id", "name", "arguments", "result", "ok", "duration"]


def _ledger_rows(entries: Sequence[ToolCallOutcome]) -> List[Dict[str, Any]]:

    return [
        {
            "index": i,
            "id": e.id,
            "name": e.name,
            "arguments": e.arguments,
            "result": json.dumps(e.result, ensure_ascii=False),
            "ok": e.ok,
            "duration": round(e.duration, 6),
        }
        for i, e in enumerate(entries, start=1)
    ]


# --- Text ----------------------------------------------------------------------
def render_summary(result: RunResult) -> str:
    """Human-readable summary of every tool call in the run."""

    lines = [RULE, "📋 FUNCTION CALL SUMMARY", RULE]

    if not result.ledger:
        lines.append("❌ No function calls were executed")
    else:
        lines.append(f"✅ Total function calls executed: {len(result.ledger)}")
        lines.append("")
        for i, call in enumerate(result.ledger, start=1):
            lines.append(f"{i}. Function: {call.name}")
            lines.append(f"   Arguments: {call.arguments}")
            lines.append(f"   Result: {json.dumps(call.result, ensure_ascii=False)}")
            lines.append(f"   Call ID: {call.id}")
            lines.append(f"   Duration: {format_duration(call.duration)}")
            if i < len(result.ledger):
                lines.append("")

    lines.append(RULE)
    lines.append(f"Stop reason: {result.stop_reason.value}")
    if result.error:
        lines.append(f"Error: {result.error}")

    return "\n".join(lines)


# --- JSON ----------------------------------------------------------------------
def export_json(result: RunResult, path: str) -> str:
    """
    Export the whole run as JSON.

    Returns: path
    """

    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.model_dump(mode="json"), f, indent=2, ensure_ascii=False)

    return path


# --- CSV -----------------------------------------------------------------------
def export_csv(entries: Sequence[ToolCallOutcome], path: str) -> str:
    """
    Export ledger entries to CSV, one row per tool call.

    An empty ledger still gets a header row.

    Returns: path
    """

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in _ledger_rows(entries):
            writer.writerow(row)

    return path


# --- PDF -----------------------------------------------------------------------
def _wrap(text: str, width: float, font: str = "Helvetica", size: int = 8) -> str:

    return "<br/>".join(escape(line) for line in simpleSplit(text, font, size, width)) or "&nbsp;"


def export_ledger_pdf(result: RunResult, path: str) -> str:
    """
    Export a run report to PDF (minimal layout).

    Returns: path
    """

    doc = SimpleDocTemplate(path, pagesize=A4)
    styles = getSampleStyleSheet()
    small = styles["BodyText"].clone("small", fontSize=8, leading=10)
    elements = []

    elements.append(Paragraph("<b>Agent run report</b>", styles["Title"]))
    elements.append(Paragraph(f"Stop reason: {result.stop_reason.value}", styles["Normal"]))
    elements.append(Paragraph(f"Iterations: {result.iterations}", styles["Normal"]))
    if result.answer:
        elements.append(Paragraph(f"Answer: {escape(result.answer)}", styles["Normal"]))
    if result.error:
        elements.append(Paragraph(f"Error: {escape(result.error)}", styles["Normal"]))
    elements.append(Spacer(1, 12))

    col_widths = [20, 110, 120, 170, 60]
    data = [["#", "Function", "Arguments", "Result", "Duration"]]
    for row in _ledger_rows(result.ledger):
        data.append([
            str(row["index"]),
            Paragraph(_wrap(row["name"], col_widths[1] - 6), small),
            Paragraph(_wrap(row["arguments"], col_widths[2] - 6), small),
            Paragraph(_wrap(row["result"], col_widths[3] - 6), small),
            format_duration(row["duration"]),
        ])

    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
    ]))
    elements.append(table)

    doc.build(elements)

    return path
