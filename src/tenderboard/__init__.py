"""TenderBoard - tender intake and triage board"""

__version__ = "0.3.0"
