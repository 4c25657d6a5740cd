"""Progress tracking: week/day pointer and completed-week history."""
