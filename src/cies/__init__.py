# src/cies/__init__.py

"""
Credibility Information Evaluation System (CIES)
Scores the credibility of information and keeps the verdicts in an append-only fact store.
"""

__version__ = "0.1.0"
__author__ = "CIES Development Team"

# No direct exports from root; subpackages are accessed explicitly
# e.g., from cies.knowledge import FactStore
