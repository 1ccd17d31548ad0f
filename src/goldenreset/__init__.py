"""
goldenreset - Reset a VMware VM to its golden snapshot.

Clones a tagged snapshot next to the live VM, swaps the clone into place and
keeps the previous version in a timestamped trash directory.
"""

__version__ = "0.1.0"
__author__ = "goldenreset Team"

from goldenreset.orchestrator import ResetOrchestrator, ResetOutcome

__all__ = ["ResetOrchestrator", "ResetOutcome", "__version__"]
