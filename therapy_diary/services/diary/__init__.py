"""Diary entry and baseline daily entry stores."""
