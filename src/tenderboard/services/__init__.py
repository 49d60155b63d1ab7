"""Document-understanding service: settings, typed schemas and client"""
from .settings import LLMSettings
from .schemas import (
    TenderMetadata,
    AnalysisRequest,
    AnalysisResult,
    Decision,
    CriterionCategory,
    ScoringSubCriterion,
)
from .llm_client import TenderAnalyst, build_analysis_system_prompt
