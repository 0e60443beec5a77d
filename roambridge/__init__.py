"""
Roam Research Headless Bridge

Drives a headless browser as a surrogate user of a Roam Research graph:
authenticated sessions, in-page queries and block mutations, and bulk
export/import through the application's own UI.
"""

__version__ = "1.0.0"
__description__ = "Headless-browser session and data-exchange layer for Roam Research graphs"
