"""
TherapyDiary backend.

Behavioural Activation programme: diary entries, daily mood logs,
weekly progress and session content.
"""
