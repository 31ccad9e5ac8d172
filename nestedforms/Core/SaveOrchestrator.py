"""
Save Orchestrator

Single Responsibility: persist a validated form tree in dependency order.

Sub-forms are saved first (each saving its own sub-forms before its own
primary model), then the root's primary model. Any failure propagates and
stops the sequence; rollback is left to the database transaction the caller
runs in.
"""
from typing import TYPE_CHECKING

import structlog

from .FormStore import MODEL
from .TargetBridge import persist_target
from .exceptions import PrimaryModelMissingError

if TYPE_CHECKING:
    from .CompositeForm import CompositeForm

logger = structlog.get_logger(__name__)


class SaveOrchestrator:

    def __init__(self, form: 'CompositeForm'):
        self._form = form
        self._store = form.get_store()

    def run(self):
        """
        Save sub-forms, then the primary model, firing the save hooks.

        Returns:
            The saved primary model object

        Raises:
            PrimaryModelMissingError: If no Model slot is named after the form
        """
        primary_name = self._form.get_form_name()
        primary = self._store.get(primary_name)
        if primary is None or primary.kind != MODEL:
            raise PrimaryModelMissingError(
                f"{type(self._form).__name__} has no model slot named '{primary_name}'. "
                f"Declare one or set Meta.form_name to an existing model slot."
            )

        self._form.run_hook("before_forms_save")
        for entry in self._store.form_entries():
            if entry.name == primary_name:
                continue
            sub_form = self._form.slot(entry.name)
            if sub_form is None:
                continue
            logger.debug("Saving sub-form", form=type(self._form).__name__, slot=entry.name)
            persist_target(sub_form)

        self._form.run_hook("before_save")
        primary_object = self._form.slot(primary_name)
        persist_target(primary_object)
        logger.info(
            "Saved composite form",
            form=type(self._form).__name__,
            model=type(primary_object).__name__,
            pk=getattr(primary_object, "pk", None),
        )
        self._form.run_hook("after_save")
        return primary_object
