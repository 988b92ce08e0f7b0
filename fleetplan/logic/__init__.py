"""Core business logic layer.

Subpackages:
- importing: workbook grid -> Plan pipeline (header, intervals, rows, marks, normalization)
- matrix: dense grid view of a plan and single-cell edits
- scheduling: next due maintenance from vehicle meters

Nothing here touches files or the network; persistence lives in infra.
"""
__all__ = ["importing", "matrix", "scheduling"]
