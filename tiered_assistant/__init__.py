"""
Tiered Assistant - a conversational loop with answer escalation

A cheap responder answers every query first; a critique scores the answer
and only low-scoring answers are escalated to a responder equipped with
encyclopedia, weather and web search lookups.
"""

__version__ = "1.0.0"
__author__ = "Tiered Assistant Team"
