"""
Clearway - Emergency Routing and Intersection Clearance Engine

Predicts road congestion, scores candidate emergency routes, and plans
intersection clearance and multi-intersection green waves.
"""

__version__ = "1.0.0"
