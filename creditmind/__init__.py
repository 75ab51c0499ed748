"""
CreditMind - Behavioral Credit-Risk Assessment Service

Scores small-business loan applicants from adaptive self-report answers
and gameplay telemetry, and produces a loan decision with terms.
"""

__version__ = "0.1.0"
