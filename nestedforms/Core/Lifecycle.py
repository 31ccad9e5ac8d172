"""
Submission lifecycle: states and hook points.

Hooks are plain methods fired by the engine in a fixed order. Override them
on a form subclass; there is no runtime registration.

    on_initialize      after slots are composed
    before_submit      first thing in submit()
    before_forms_save  before sub-forms are saved
    before_save        before the primary model is saved
    after_save         after the primary model is saved
"""
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class SubmissionState(str, Enum):
    UNSUBMITTED = "unsubmitted"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"
    SAVED = "saved"
    REJECTED = "rejected"


class FormLifecycle:
    """Mixin providing the no-op hook methods and the hook runner."""

    HOOKS = ("on_initialize", "before_submit", "before_forms_save", "before_save", "after_save")

    def on_initialize(self):
        pass

    def before_submit(self):
        pass

    def before_forms_save(self):
        pass

    def before_save(self):
        pass

    def after_save(self):
        pass

    def run_hook(self, hook_name: str) -> None:
        if hook_name not in self.HOOKS:
            raise ValueError(f"Unknown form hook '{hook_name}'.")
        logger.debug("Running form hook", form=type(self).__name__, hook=hook_name)
        getattr(self, hook_name)()
