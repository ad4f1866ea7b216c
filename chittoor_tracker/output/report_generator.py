"""
Report generation for project analytics.

This module provides the ProjectReportGenerator class which aggregates project
records with pandas (status counts, per-mandal and per-site-visit summaries,
financial totals) and writes timestamped CSV files and a text summary.
"""

import pandas as pd
import numpy as np
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config import TrackerConfig
from ..exceptions import OutputGenerationError
from ..logging_config import TrackerLogger
from ..models import ProjectRecord, SiteVisitStatus
from ..projects.feed import count_statuses


UNASSIGNED = "Unassigned"


def format_currency(amount: Optional[float]) -> str:
    """Rupee amount with thousands separators, or a dash when missing/zero."""
    if amount is None or pd.isna(amount) or amount == 0:
        return "—"
    if float(amount).is_integer():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"


def format_date(value: Optional[str], with_time: bool = False) -> str:
    """``dd MMM yyyy`` (optionally with ``HH:mm``), or a dash when missing/invalid."""
    if not value:
        return "—"
    parsed = pd.to_datetime(value, errors='coerce', utc=True)
    if pd.isna(parsed):
        return "—"
    return parsed.strftime("%d %b %Y, %H:%M" if with_time else "%d %b %Y")


class ProjectReportGenerator:
    """
    Aggregates project records and writes report files.

    File names carry the timestamp of the generator's creation so the files of
    one run sort together.
    """

    def __init__(self, config: TrackerConfig, logger: Optional[TrackerLogger] = None):
        """
        Initialize the ProjectReportGenerator.

        Args:
            config: Configuration object with output directory and settings
            logger: Optional logger instance for logging operations
        """
        self.config = config
        self.logger = logger or TrackerLogger()
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.file_patterns = {
            'projects': 'projects_{timestamp}.csv',
            'by_mandal': 'projects_by_mandal_{timestamp}.csv',
            'by_site_visit': 'projects_by_site_visit_{timestamp}.csv',
            'summary_report': 'project_summary_report_{timestamp}.txt'
        }

    def build_frame(self, records: Sequence[ProjectRecord]) -> pd.DataFrame:
        """
        Convert records to a DataFrame with one row per project.

        Args:
            records: Project records

        Returns:
            DataFrame with the record fields as columns
        """
        columns = ProjectRecord.field_names()
        df = pd.DataFrame([record.to_dict() for record in records], columns=columns)
        for col in ('capacity_kw', 'project_cost', 'payment_amount'):
            df[col] = pd.to_numeric(df[col], errors='coerce')
        df['mandal'] = df['mandal'].fillna(UNASSIGNED)
        return df

    def status_counts(self, records: Sequence[ProjectRecord]) -> Dict[str, int]:
        """Counts per approval status plus ``all``."""
        return count_statuses(records)

    def summarize_by_mandal(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Per-mandal totals.

        Returns:
            DataFrame indexed by mandal with project count, approved count,
            total capacity, total cost and total payments
        """
        if df.empty:
            return pd.DataFrame(
                columns=['projects', 'approved', 'capacity_kw', 'project_cost', 'payment_amount']
            )

        summary = df.assign(
            approved=np.where(df['approval_status'] == 'approved', 1, 0)
        ).groupby('mandal').agg(
            projects=('id', 'count'),
            approved=('approved', 'sum'),
            capacity_kw=('capacity_kw', 'sum'),
            project_cost=('project_cost', 'sum'),
            payment_amount=('payment_amount', 'sum'),
        )
        return summary.sort_values(['projects', 'project_cost'], ascending=False)

    def summarize_by_site_visit(self, df: pd.DataFrame) -> pd.DataFrame:
        """Project counts per site visit status, every status listed."""
        order = [status.value for status in SiteVisitStatus]
        counts = df['site_visit_status'].value_counts() if not df.empty else pd.Series(dtype=int)
        result = counts.reindex(order, fill_value=0).astype(int)
        unknown = int(df['site_visit_status'].isna().sum()) if not df.empty else 0
        result.loc['Not set'] = unknown
        return result.rename_axis('site_visit_status').to_frame('projects')

    def financial_summary(self, df: pd.DataFrame) -> Dict[str, float]:
        """Totals over all projects."""
        if df.empty:
            return {'total_capacity_kw': 0.0, 'total_project_cost': 0.0,
                    'total_payment_requested': 0.0, 'outstanding': 0.0}

        total_cost = float(df['project_cost'].sum())
        total_payment = float(df['payment_amount'].sum())
        return {
            'total_capacity_kw': float(df['capacity_kw'].sum()),
            'total_project_cost': total_cost,
            'total_payment_requested': total_payment,
            'outstanding': total_cost - total_payment,
        }

    def generate_all_outputs(self, records: Sequence[ProjectRecord]) -> Dict[str, str]:
        """
        Write all report files.

        Args:
            records: Project records

        Returns:
            Dictionary mapping output type to generated file path
        """
        self.logger.info("Starting report generation")
        output_dir = self.config.ensure_output_directory()
        generated_files = {}
        df = self.build_frame(records)

        try:
            generated_files['projects'] = self._write_csv(
                df.drop(columns=['images']).assign(
                    images=[';'.join(r.images) for r in records]
                ),
                output_dir, 'projects', index=False
            )
            generated_files['by_mandal'] = self._write_csv(
                self.summarize_by_mandal(df), output_dir, 'by_mandal', index=True
            )
            generated_files['by_site_visit'] = self._write_csv(
                self.summarize_by_site_visit(df), output_dir, 'by_site_visit', index=True
            )
            generated_files['summary_report'] = self._write_summary(records, df, output_dir)
        except OSError as e:
            raise OutputGenerationError(
                f"Error generating report files: {e}",
                output_type='report',
                output_path=str(output_dir),
                record_count=len(records),
                original_error=e
            )

        self.logger.info(f"Generated {len(generated_files)} output files")
        return generated_files

    def _file_path(self, output_dir: Path, key: str) -> Path:
        return output_dir / self.file_patterns[key].format(timestamp=self.timestamp)

    def _write_csv(self, df: pd.DataFrame, output_dir: Path, key: str, index: bool) -> str:
        path = self._file_path(output_dir, key)
        df.to_csv(path, index=index, encoding='utf-8')
        self.logger.log_file_operation("Wrote", str(path), len(df))
        return str(path)

    def _write_summary(self, records: Sequence[ProjectRecord], df: pd.DataFrame,
                       output_dir: Path) -> str:
        path = self._file_path(output_dir, 'summary_report')
        lines = self.summary_lines(records, df)
        path.write_text("\n".join(lines) + "\n", encoding='utf-8')
        self.logger.info(f"Wrote summary report: {path}")
        return str(path)

    def summary_lines(self, records: Sequence[ProjectRecord],
                      df: Optional[pd.DataFrame] = None) -> List[str]:
        """Plain-text summary used for the report file and the CLI."""
        if df is None:
            df = self.build_frame(records)

        counts = self.status_counts(records)
        money = self.financial_summary(df)

        lines = [
            "=" * 60,
            "CHITTOOR PROJECTS SUMMARY",
            "=" * 60,
            f"Generated at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "Approval status (CRM):",
        ]
        for key, value in counts.items():
            lines.append(f"  {key.capitalize():<10} {value:,}")

        lines += [
            "",
            "Totals:",
            f"  Capacity:          {money['total_capacity_kw']:,.1f} kW",
            f"  Project cost:      {format_currency(money['total_project_cost'])}",
            f"  Payment requested: {format_currency(money['total_payment_requested'])}",
            f"  Outstanding:       {format_currency(money['outstanding'])}",
            "",
            "Projects by mandal:",
        ]

        by_mandal = self.summarize_by_mandal(df)
        if by_mandal.empty:
            lines.append("  (none)")
        for mandal, row in by_mandal.iterrows():
            lines.append(f"  {mandal:<24} {int(row['projects']):>4} projects, "
                         f"{int(row['approved']):>4} approved, "
                         f"{format_currency(row['project_cost'])}")

        lines += ["", "Site visits:"]
        for status, row in self.summarize_by_site_visit(df).iterrows():
            lines.append(f"  {status:<10} {int(row['projects']):,}")

        return lines
