"""
Inventory usage reports for the service management application.

Fetches spare-part usage reports, derives usage statistics and exports
the rendered report as a paginated PDF.
"""

__version__ = "0.1.0"
