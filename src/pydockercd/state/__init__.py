"""State/store layer.

This package is the single source of truth for how the initial HTTP fetch
and live stream events are reconciled into the canonical stack map.
"""
