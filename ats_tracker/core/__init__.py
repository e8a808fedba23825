"""
Core business logic for ATS Tracker.

Submodules:
- matching: Fuzzy skill similarity and matching
- screening: Experience scoring and the composite screening score
- tracking: Application state machine and tracking orchestrator
- exceptions: Error taxonomy
"""
