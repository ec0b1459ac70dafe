"""
Install and update workflows.
"""

from .context import SyncContext
from .dependencies import check_dependencies
from .reconciler import LocalTreeReconciler
from .install import InstallWorkflow
from .update import UpdateWorkflow

__all__ = [
    "SyncContext",
    "check_dependencies",
    "LocalTreeReconciler",
    "InstallWorkflow",
    "UpdateWorkflow"
]
