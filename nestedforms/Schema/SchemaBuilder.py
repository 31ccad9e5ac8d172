"""
Schema builder classes for describing composite forms to a frontend.

Following SOLID principles:
- SRP: Schema generation is separated from form logic
- OCP: New schema formats can be added without modifying CompositeForm
- DIP: Views depend on the FormSchemaBuilder abstraction
"""
import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from nestedforms.Core.FormStore import FormEntry, ModelEntry, MODEL
from nestedforms.Core.TargetBridge import model_field

if TYPE_CHECKING:
    from nestedforms.Core.CompositeForm import CompositeForm


class FormSchemaBuilder(ABC):
    """
    Abstract interface for building form schemas.

    Implement this interface to create custom schema formats
    (e.g., OpenAPI, GraphQL, etc.)
    """

    @abstractmethod
    def build(self, form: "CompositeForm") -> dict:
        """
        Build and return the schema for the form.

        Args:
            form: The CompositeForm instance to generate schema for

        Returns:
            dict: The generated schema
        """
        ...


class CompositeFormSchemaBuilder(FormSchemaBuilder):
    """
    Default JSON schema builder for composite forms.

    Generates:
    - Form metadata (name, class, action, persisted)
    - Root field metadata (name, label, required, value, errors)
    - One entry per slot: model slots list their delegated fields with
      values and model field types, sub-form slots nest a full schema
    - The errors of the last validation pass (never triggers validation)
    """

    def build(self, form: "CompositeForm") -> dict:
        """Build complete form schema."""
        schema = self._build_base_structure(form)
        errors = form.error_messages()

        for field_name, field in form.fields.items():
            schema["fields"].append(self._build_field_schema(form, field_name, field, errors))

        for entry in form.get_store():
            if entry.kind == MODEL:
                schema["slots"].append(self._build_model_slot(form, entry, errors))
            else:
                schema["slots"].append(self._build_form_slot(form, entry))

        schema["form_level_errors"] = errors.get("__all__", [])
        schema["errors"] = errors
        return schema

    def _build_base_structure(self, form: "CompositeForm") -> dict:
        """Build the base schema structure with form metadata."""
        return {
            "form_name": form.get_form_name(),
            "form_class": form.__class__.__name__,
            "action": form.action,
            "persisted": form.persisted,
            "fields": [],
            "slots": [],
        }

    def _build_field_schema(self, form: "CompositeForm", field_name: str, field, errors: dict) -> dict:
        """Build schema for a root Django form field."""
        return {
            "name": field_name,
            "label": field.label or field_name.replace("_", " ").title(),
            "help_text": field.help_text or None,
            "required": field.required,
            "value": self._serializable(form.data.get(field_name, field.initial if not callable(field.initial) else None)),
            "field_level_errors": errors.get(field_name, []),
        }

    def _build_model_slot(self, form: "CompositeForm", entry: ModelEntry, errors: dict) -> dict:
        target = form.slot(entry.name)
        model_class = entry.resolve()
        required = {rule.field for rule in form.get_store().presence_rules() if rule.slot == entry.name}
        fields = []
        for field_name in sorted(entry.fields):
            backing_field = model_field(model_class, field_name)
            fields.append({
                "name": field_name,
                "type": backing_field.get_internal_type() if backing_field is not None else None,
                "required": field_name in required,
                "value": self._serializable(getattr(target, field_name, None)),
                "field_level_errors": errors.get(field_name, []),
            })
        return {
            "name": entry.name,
            "kind": entry.kind,
            "model": self._model_label(model_class),
            "primary": entry.name == form.get_form_name(),
            "fields": fields,
        }

    def _build_form_slot(self, form: "CompositeForm", entry: FormEntry) -> dict:
        sub_form = form.slot(entry.name)
        return {
            "name": entry.name,
            "kind": entry.kind,
            "source": entry.source,
            "form": self.build(sub_form) if sub_form is not None else None,
        }

    def _model_label(self, model_class: Any) -> str:
        meta = getattr(model_class, "_meta", None)
        if meta is not None:
            return meta.label
        return model_class.__name__

    def _serializable(self, value: Any) -> Optional[Any]:
        """Keep JSON-serializable values as they are; stringify the rest."""
        if value is None:
            return None
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            return str(value)
        return value
