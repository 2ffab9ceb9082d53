"""Interactive wizard: prompts and the generation state machine."""

from frameforge.wizard.controller import (
    PathConflictAbort,
    WizardController,
    WizardOutcome,
    WizardState,
)
from frameforge.wizard.prompts import InputValidationError, LineReader, RichLineReader

__all__ = [
    "InputValidationError",
    "LineReader",
    "PathConflictAbort",
    "RichLineReader",
    "WizardController",
    "WizardOutcome",
    "WizardState",
]
