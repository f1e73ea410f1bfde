from .report import CostReport, build_report

__all__ = ['CostReport', 'build_report']
