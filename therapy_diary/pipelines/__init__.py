"""
TherapyDiary Pipelines.

Business logic orchestration functions.
"""

from therapy_diary.pipelines.daily_entries import *
from therapy_diary.pipelines.sessions import *
