"""dchangelog - Technical Specification Document generator.

Diffs two git revisions and renders the changed files into a TSD PDF,
or merges a folder of such PDFs into one document.
"""

__version__ = "1.0.0"
__author__ = "dchangelog Team"

__all__ = ["__version__"]
