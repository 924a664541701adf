"""Undo/redo edit engine and automation curve model.

Public surface:
  HistoryStack            – undo/redo history with command merging
  EditContext             – per-document settings, history and clipboard
  AutomationLane, AutomationPoint, CurveType, PointSnapshot  – curve model
  Note, Pattern, MixerChannel, Send, BusChannel, MasterChannel,
  Arrangement, ArrangementSection, SectionType  – other edited aggregates
  simplify, rdp_indices   – Ramer-Douglas-Peucker thinning
  ops.*                   – the command variants
"""

from .state import (
    TIME_EPSILON, CurveType, PointSnapshot, AutomationPoint, AutomationCurve,
    AutomationLane, Note, Pattern, MixerChannel, Send, BusChannel,
    MasterChannel, SectionType, ArrangementSection, Arrangement,
)
from .commands import Command, CompoundCommand, COMMAND_KINDS
from .undo import HistoryStack
from .clipboard import AutomationClipboard
from .context import EditContext
from .core.simplify import simplify, rdp_indices
from .ops import automation, thin, notes, mixer, sections  # noqa: F401  registers variants

__all__ = [
    "TIME_EPSILON", "CurveType", "PointSnapshot", "AutomationPoint",
    "AutomationCurve", "AutomationLane", "Note", "Pattern", "MixerChannel",
    "Send", "BusChannel", "MasterChannel", "SectionType",
    "ArrangementSection", "Arrangement",
    "Command", "CompoundCommand", "COMMAND_KINDS",
    "HistoryStack", "AutomationClipboard", "EditContext",
    "simplify", "rdp_indices",
]
