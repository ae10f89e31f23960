# docstitch/core/processor/docx_helper/docx_constants.py
"""
DOCX 처리 상수

The vertical-merge states a w:tc can declare.
"""
from enum import Enum
from types import MappingProxyType


class VMergeState(Enum):
    """Vertical merge state of a table cell."""
    NONE = "none"
    RESTART = "restart"
    CONTINUE = "continue"


# w:vMerge/@w:val -> state; an absent val means continue
VMERGE_VALUES = MappingProxyType({
    'restart': VMergeState.RESTART,
    'continue': VMergeState.CONTINUE,
    None: VMergeState.CONTINUE,
})


__all__ = [
    'VMergeState',
    'VMERGE_VALUES',
]
