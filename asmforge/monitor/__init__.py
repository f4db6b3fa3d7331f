"""asmforge run summary — Rich rendering of a finished ``RunReport``.

Modules
-------
renderer
    ``SummaryRenderer`` turns ``RunReport`` and ``FingerprintLedger`` into
    Rich renderables: one row per artifact plus an overall status line.
"""
