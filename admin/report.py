import base64
import html
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from admin.plotting import sorted_tally


def _md_cell(text: str) -> str:
    # A bare pipe would end the table cell.
    return text.replace("|", "\\|")


class TallyReport:
    def __init__(self, tally: Mapping[str, int], raw_count: int = 0, ledger_path: str | None = None):
        self.tally = dict(tally)
        self.raw_count = raw_count
        self.ledger_path = ledger_path
        self.total = sum(self.tally.values())

    def rows(self) -> list[dict]:
        rows = []
        for candidate, count in sorted_tally(self.tally):
            share = count / self.total if self.total > 0 else 0.0
            rows.append({"candidate": candidate, "count": count, "share": share})
        return rows

    def leader(self) -> str | None:
        rows = self.rows()
        if not rows:
            return None
        # A shared top count has no single leader.
        if len(rows) > 1 and rows[0]["count"] == rows[1]["count"]:
            return None
        return rows[0]["candidate"]

    def generate_markdown(self, output_path: Path, chart_path: Path | None = None) -> None:
        output_path = Path(output_path)
        date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        candidate_rows = [
            f"| {_md_cell(row['candidate'])} | {row['count']} | {row['share']:.2%} |" for row in self.rows()
        ]
        candidate_table = "\n".join(candidate_rows) if candidate_rows else "| - | 0 | - |"

        chart_section = ""
        if chart_path is not None and Path(chart_path).exists():
            chart_section = f"\n## Chart\n![Votes per candidate]({Path(chart_path).name})\n"

        md_content = f"""# Vote Tally Report

## Ledger Summary
- **Ledger:** {self.ledger_path or 'N/A'}
- **Date:** {date}
- **Counted Votes:** {self.total}
- **Candidates:** {len(self.tally)}
- **Leader:** {self.leader() or 'N/A'}

## Votes per Candidate
| Candidate | Votes | Share |
|-----------|-------|-------|
{candidate_table}

## Data Quality
- **Undecodable Entries (not counted):** {self.raw_count}
{chart_section}"""
        output_path.write_text(md_content, encoding="utf-8")

    def generate_html(self, output_path: Path, chart_path: Path | None = None) -> None:
        output_path = Path(output_path)
        date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        embedded_chart = "<p>No chart available.</p>"
        if chart_path is not None and Path(chart_path).exists():
            with open(chart_path, "rb") as f:
                encoded = base64.b64encode(f.read()).decode("utf-8")
            embedded_chart = f'<img src="data:image/png;base64,{encoded}" alt="Votes per candidate">'

        candidate_rows = [
            f"<tr><td>{html.escape(row['candidate'])}</td><td>{row['count']}</td><td>{row['share']:.2%}</td></tr>"
            for row in self.rows()
        ]

        html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Vote Tally Report</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 1000px; margin: 0 auto; padding: 20px; background-color: #f4f7f6; }}
        h1, h2 {{ color: #2c3e50; }}
        section {{ background: white; padding: 25px; margin-bottom: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.05); }}
        table {{ border-collapse: collapse; width: 100%; margin-bottom: 20px; }}
        th, td {{ border: 1px solid #eee; padding: 12px; text-align: left; }}
        th {{ background-color: #f8f9fa; color: #2c3e50; font-weight: 600; }}
        tr:nth-child(even) {{ background-color: #fafafa; }}
        img {{ max-width: 100%; height: auto; border: 1px solid #ddd; border-radius: 5px; }}
        .kpi-container {{ display: flex; flex-wrap: wrap; gap: 20px; }}
        .kpi-card {{ flex: 1; min-width: 200px; background: #fff; border-top: 4px solid #3498db; border-radius: 8px; padding: 20px; box-shadow: 0 2px 10px rgba(0,0,0,0.05); text-align: center; }}
        .kpi-value {{ font-size: 28px; font-weight: bold; color: #2c3e50; margin-top: 10px; }}
        .kpi-label {{ font-size: 12px; color: #7f8c8d; text-transform: uppercase; letter-spacing: 1px; }}
    </style>
</head>
<body>
    <header style="margin-bottom: 40px; text-align: center;">
        <h1>Vote Tally Report</h1>
        <p style="color: #7f8c8d;">Generated on {date} from {html.escape(self.ledger_path or 'N/A')}</p>
    </header>

    <section style="background: transparent; box-shadow: none; padding: 0;">
        <div class="kpi-container">
            <div class="kpi-card">
                <div class="kpi-label">Counted Votes</div>
                <div class="kpi-value">{self.total}</div>
            </div>
            <div class="kpi-card">
                <div class="kpi-label">Candidates</div>
                <div class="kpi-value">{len(self.tally)}</div>
            </div>
            <div class="kpi-card">
                <div class="kpi-label">Leader</div>
                <div class="kpi-value">{html.escape(self.leader() or 'N/A')}</div>
            </div>
            <div class="kpi-card">
                <div class="kpi-label">Undecodable Entries</div>
                <div class="kpi-value">{self.raw_count}</div>
            </div>
        </div>
    </section>

    <section>
        <h2>Votes per Candidate</h2>
        <table>
            <thead>
                <tr>
                    <th>Candidate</th>
                    <th>Votes</th>
                    <th>Share</th>
                </tr>
            </thead>
            <tbody>
                {"".join(candidate_rows)}
            </tbody>
        </table>
    </section>

    <section>
        <h2>Chart</h2>
        {embedded_chart}
    </section>
</body>
</html>
"""
        output_path.write_text(html_content, encoding="utf-8")
