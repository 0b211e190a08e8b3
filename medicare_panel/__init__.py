"""
Medicare Physician Panel Report

Two-year panel analysis of Medicare physician billing (CMS Physician &
Other Practitioners by Provider PUF): charge summaries, specialty mix,
an allowed-amount regression, and a cross-year charge correlation.
"""

__version__ = "0.1.0"
