"""
PatraKosh Client - Operation State Model

Busy and error flags surfaced to the user while the sync controller works.

Author: PatraKosh Project
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OperationState:
    """
    Snapshot of the controller's busy/error flags.

    Attributes:
        loading: A refresh (list + stats) is in flight
        uploading: An upload, including its follow-up refresh, is in flight
        error_message: Message of the last terminal failure, "" when none
    """
    loading: bool = False
    uploading: bool = False
    error_message: str = ""

    @property
    def busy(self) -> bool:
        return self.loading or self.uploading
