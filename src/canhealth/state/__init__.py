"""State layer.

Holds the reconciled view state the sync controller produces and the
presentation layer reads, plus the policies that decide when to poll and
which responses to apply.
"""
