"""
Deterministic grid calculation.

Pure Python math. No I/O.
Given a dimension range and one profile's cost model + frame-type
multipliers, produce exact material lengths, bar counts, offcuts and costs.
"""
