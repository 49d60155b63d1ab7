"""Typed request/response models for the document-understanding service.

Responses are parsed with from_dict(): every optional field falls back to a
defined default (empty string, empty list, 0) so downstream code never sees
a missing key. Only the fields the contract guarantees are checked strictly.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from ..documents import DocumentFile
from ..errors import ServiceResponseError


def _str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def _num(data: Dict[str, Any], key: str) -> float:
    """Numeric field, clamped to 0-100 (weights are percentages or points)."""
    value = data.get(key)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(100.0, number))


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


# =============================================================================
# Metadata extraction (summary sheet -> form fields)
# =============================================================================

@dataclass
class TenderMetadata:
    """Fields extracted from a tender summary sheet. Only `name` is guaranteed."""
    name: str
    budget: str = ""
    scoring_system: str = ""
    tender_page_url: str = ""
    admin_url: str = ""
    tech_url: str = ""

    @classmethod
    def empty(cls) -> 'TenderMetadata':
        return cls(name="")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TenderMetadata':
        return cls(
            name=_str(data, 'name'),
            budget=_str(data, 'budget'),
            scoring_system=_str(data, 'scoringSystem'),
            tender_page_url=_str(data, 'tenderPageUrl'),
            admin_url=_str(data, 'adminUrl'),
            tech_url=_str(data, 'techUrl'),
        )


# =============================================================================
# Feasibility analysis (documents + rules -> report)
# =============================================================================

class Decision(str, Enum):
    KEEP = 'KEEP'
    DISCARD = 'DISCARD'
    REVIEW = 'REVIEW'


class CriterionCategory(str, Enum):
    PRICE = 'PRICE'        # pure price formula
    FORMULA = 'FORMULA'    # automatic, objective, not price
    VALUE = 'VALUE'        # subjective value judgement


@dataclass
class ScoringSubCriterion:
    label: str
    weight: float
    category: CriterionCategory

    def to_dict(self) -> dict:
        return {'label': self.label, 'weight': self.weight, 'category': self.category.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoringSubCriterion':
        raw = str(data.get('category', '')).upper()
        category = CriterionCategory(raw) if raw in CriterionCategory.__members__ else CriterionCategory.VALUE
        return cls(label=_str(data, 'label'), weight=_num(data, 'weight'), category=category)


@dataclass
class EconomicSection:
    budget: str = ""
    model: str = ""
    basis: str = ""


@dataclass
class ScopeSection:
    objective: str = ""
    deliverables: List[str] = field(default_factory=list)


@dataclass
class ResourcesSection:
    duration: str = ""
    team: str = ""
    dedication: str = ""


@dataclass
class SolvencySection:
    certifications: str = ""
    specific_solvency: str = ""
    penalties: str = ""


@dataclass
class StrategySection:
    angle: str = ""


@dataclass
class ScoringSection:
    price_weight: float = 0.0
    formula_weight: float = 0.0
    value_weight: float = 0.0
    details: str = ""
    sub_criteria: List[ScoringSubCriterion] = field(default_factory=list)


@dataclass
class AnalysisResult:
    """Executive feasibility report for one tender (Go/No-Go)."""
    decision: Decision
    summary_reasoning: str = ""
    economic: EconomicSection = field(default_factory=EconomicSection)
    scope: ScopeSection = field(default_factory=ScopeSection)
    resources: ResourcesSection = field(default_factory=ResourcesSection)
    solvency: SolvencySection = field(default_factory=SolvencySection)
    strategy: StrategySection = field(default_factory=StrategySection)
    scoring: ScoringSection = field(default_factory=ScoringSection)

    def to_dict(self) -> dict:
        """Serialise with the service's camelCase keys."""
        return {
            'decision': self.decision.value,
            'summaryReasoning': self.summary_reasoning,
            'economic': asdict(self.economic),
            'scope': asdict(self.scope),
            'resources': asdict(self.resources),
            'solvency': {
                'certifications': self.solvency.certifications,
                'specificSolvency': self.solvency.specific_solvency,
                'penalties': self.solvency.penalties,
            },
            'strategy': asdict(self.strategy),
            'scoring': {
                'priceWeight': self.scoring.price_weight,
                'formulaWeight': self.scoring.formula_weight,
                'valueWeight': self.scoring.value_weight,
                'details': self.scoring.details,
                'subCriteria': [c.to_dict() for c in self.scoring.sub_criteria],
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisResult':
        """Validate a service response. Raises ServiceResponseError on a bad decision."""
        if not isinstance(data, dict):
            raise ServiceResponseError(f"Expected a JSON object, got {type(data).__name__}")

        raw_decision = str(data.get('decision', '')).upper()
        if raw_decision not in Decision.__members__:
            raise ServiceResponseError(f"Invalid or missing decision: {data.get('decision')!r}")

        economic = _section(data, 'economic')
        scope = _section(data, 'scope')
        resources = _section(data, 'resources')
        solvency = _section(data, 'solvency')
        strategy = _section(data, 'strategy')
        scoring = _section(data, 'scoring')

        deliverables = scope.get('deliverables')
        sub_criteria = scoring.get('subCriteria')

        return cls(
            decision=Decision(raw_decision),
            summary_reasoning=_str(data, 'summaryReasoning'),
            economic=EconomicSection(
                budget=_str(economic, 'budget'),
                model=_str(economic, 'model'),
                basis=_str(economic, 'basis'),
            ),
            scope=ScopeSection(
                objective=_str(scope, 'objective'),
                deliverables=[str(d) for d in deliverables] if isinstance(deliverables, list) else [],
            ),
            resources=ResourcesSection(
                duration=_str(resources, 'duration'),
                team=_str(resources, 'team'),
                dedication=_str(resources, 'dedication'),
            ),
            solvency=SolvencySection(
                certifications=_str(solvency, 'certifications'),
                specific_solvency=_str(solvency, 'specificSolvency'),
                penalties=_str(solvency, 'penalties'),
            ),
            strategy=StrategySection(angle=_str(strategy, 'angle')),
            scoring=ScoringSection(
                price_weight=_num(scoring, 'priceWeight'),
                formula_weight=_num(scoring, 'formulaWeight'),
                value_weight=_num(scoring, 'valueWeight'),
                details=_str(scoring, 'details'),
                sub_criteria=[
                    ScoringSubCriterion.from_dict(c) for c in sub_criteria if isinstance(c, dict)
                ] if isinstance(sub_criteria, list) else [],
            ),
        )


@dataclass
class AnalysisRequest:
    """Everything the analysis service sees for one tender."""
    name: str
    rules: str
    budget: str = ""
    scoring_system: str = ""
    source_url: str = ""
    summary_file: Optional[DocumentFile] = None
    admin_file: Optional[DocumentFile] = None
    tech_file: Optional[DocumentFile] = None

    def labelled_files(self) -> List[tuple]:
        """(label, file) pairs in fixed order, skipping absent files."""
        labelled = [
            ("DOCUMENTO 1: HOJA RESUMEN", self.summary_file),
            ("DOCUMENTO 2: PLIEGO ADMINISTRATIVO (PCAP)", self.admin_file),
            ("DOCUMENTO 3: PLIEGO TÉCNICO (PPT)", self.tech_file),
        ]
        return [(label, f) for label, f in labelled if f is not None]

    def header_text(self) -> str:
        return (
            "--- TENDER INFO ---\n"
            f"Name: {self.name}\n"
            f"Budget: {self.budget or 'Not specified'}\n"
            f"Scoring: {self.scoring_system or 'Not specified'}\n"
            f"Source URL: {self.source_url or 'N/A'}\n\n"
            "--- ATTACHED DOCUMENTS FOR ANALYSIS ---"
        )
