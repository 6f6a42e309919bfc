"""
Grievance recording and weekly statistics.
"""
