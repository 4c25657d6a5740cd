"""
Request schemas for the TherapyDiary API.
"""
