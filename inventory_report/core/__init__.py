"""
Core modules for inventory usage reports.

This package contains the data models, usage statistics, page tiling,
report layout and the report fetch controller.
"""
