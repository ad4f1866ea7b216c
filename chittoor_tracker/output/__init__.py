"""
Report generation.
"""

from .report_generator import ProjectReportGenerator, format_currency, format_date

__all__ = ['ProjectReportGenerator', 'format_currency', 'format_date']
