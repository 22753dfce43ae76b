"""Survey Analysis: scoring and classification of psychosocial surveys.

Components:
- config.py: Section taxonomy, incident keywords, thresholds, recommendations
- matchers.py: Field-to-section and field-to-incident strategies
- section_scorer.py: Per-section averages and risk levels
- incident_detector.py: Bullying/harassment/pressure/conflict disclosures
- classifier.py: Overall risk level and action flag
- analyzer.py: analyze_submission pipeline (imports remediation)
- handler.py: Flask HTTP endpoints

Usage:
    from workwell.services.survey_analysis.analyzer import SurveyAnalyzer
    analyzer = SurveyAnalyzer(submissions, synthesizer)
    result = analyzer.analyze_submission(submission_id)
"""

from .config import AnalysisConfig, SECTION_TAXONOMY, INCIDENT_KEYWORDS
from .section_scorer import SectionScorer
from .incident_detector import CriticalIncidentDetector
from .classifier import RiskClassifier, Classification

__all__ = [
    "AnalysisConfig",
    "SECTION_TAXONOMY",
    "INCIDENT_KEYWORDS",
    "SectionScorer",
    "CriticalIncidentDetector",
    "RiskClassifier",
    "Classification",
]
