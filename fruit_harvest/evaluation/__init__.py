"""
Evaluation Package
==================

Headless autoplay harness for checking score balance.
"""

from fruit_harvest.evaluation.run_autoplay import play_session, run_autoplay

__all__ = ["play_session", "run_autoplay"]
