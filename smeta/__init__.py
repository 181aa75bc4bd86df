"""
Smeta calculators — paid, time-limited access to construction estimate calculators.
"""
