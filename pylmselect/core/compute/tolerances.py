"""
Conditioning threshold for the solver's numerical diagnostics.

Above CONDITION_THRESHOLD a fit carries an ill-conditioning warning in
Result.warnings. At cond(X) = 1e6, cond(X'X) = 1e12, so the normal
equations would lose about 12 of 16 digits while QR loses about 6.
"""

CONDITION_THRESHOLD = 1e6
