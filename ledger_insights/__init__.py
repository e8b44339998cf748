"""
Ledger Insights - Source Package

Financial analysis for a personal ledger: turns income and expense
records into a monthly summary, asks Gemini for advice on it, and
falls back to rule-based advice whenever the model cannot help.

DESIGN PRINCIPLES:
1. The caller always gets a usable analysis
2. Degradation is reported, never hidden
3. Aggregation is pure and deterministic
4. Every step is auditable
5. Storage and provider are swappable
"""

__version__ = "1.0.0"
__author__ = "Ledger Insights Team"
