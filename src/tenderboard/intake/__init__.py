"""Tender intake orchestration"""
from .orchestrator import TenderIntake, IntakeDraft, ScrapeOutcome, find_tender_page_link
