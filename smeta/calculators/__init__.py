"""
Deterministic estimate calculators.

Pure Python math, no I/O, no shared state. Given the structured fields the
front end sends, produce a volume, the formula used, a variable breakdown,
an optional coefficient and the regulatory justification.
"""
