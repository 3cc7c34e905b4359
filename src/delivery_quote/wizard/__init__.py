"""Wizard subpackage - step validation, session state machine and submission."""
from .session import WizardSession
from .validation import WizardStep, PROGRESS_STEPS, can_advance, can_go_back

__all__ = ['WizardSession', 'WizardStep', 'PROGRESS_STEPS', 'can_advance', 'can_go_back']
