"""
Behave environment configuration

Runs before and after scenarios to reset per-scenario state.
"""

import os
import sys

# Add project root to Python path so the anchoring package imports without install
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from anchoring.logging_config import ThreadIndent  # noqa: E402


def before_scenario(context, scenario):
    """Clear documents, anchors and results of the previous scenario"""
    ThreadIndent.reset()
    for name in ("space", "anchor", "selectors", "range", "error"):
        if hasattr(context, name):
            delattr(context, name)
