"""
Anatomy Guru - structured evaluation reports for medical answer sheets.

This package normalizes a student answer sheet and faculty notes, asks a
multimodal LLM for a structured evaluation that keeps the faculty's marks
and the answer key's facts, and renders the result for export.
"""

__version__ = "1.0.0"
__author__ = "Anatomy Guru Team"
