"""Workwell services.

- survey_analysis: Scores one psychosocial survey and classifies its risk
- remediation: Creates risk, measures and notifications for actionable results
- reporting_service: Annual per-tenant reports and management summaries
"""
