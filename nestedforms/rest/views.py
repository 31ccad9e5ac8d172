"""
API view that serves and submits a composite form.

GET describes the form (schema), POST submits a create form, PUT/PATCH
submit an edit form for ``get_instance()``. Submissions run inside one
database transaction so a failing nested save rolls the whole tree back.
"""
from typing import Any, Optional, Type

import structlog
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from nestedforms.Core.CompositeForm import CompositeForm
from nestedforms.Schema.SchemaBuilder import CompositeFormSchemaBuilder, FormSchemaBuilder

logger = structlog.get_logger(__name__)


class CompositeFormView(APIView):
    form_class: Optional[Type[CompositeForm]] = None
    schema_builder_class: Type[FormSchemaBuilder] = CompositeFormSchemaBuilder

    def get_instance(self) -> Optional[Any]:
        """Domain object being edited; None means the view only creates."""
        return None

    def get_form(self, instance: Optional[Any] = None) -> CompositeForm:
        if self.form_class is None:
            raise ImproperlyConfigured(f"{type(self).__name__} is missing a form_class.")
        return self.form_class(instance)

    def get_schema(self, form: CompositeForm) -> dict:
        return self.schema_builder_class().build(form)

    def get(self, request, *args, **kwargs):
        form = self.get_form(self.get_instance())
        return Response(self.get_schema(form))

    def post(self, request, *args, **kwargs):
        return self._submit(request, None, status.HTTP_201_CREATED)

    def put(self, request, *args, **kwargs):
        return self._submit(request, self.get_instance(), status.HTTP_200_OK)

    def patch(self, request, *args, **kwargs):
        return self._submit(request, self.get_instance(), status.HTTP_200_OK)

    def _submit(self, request, instance: Optional[Any], success_status: int):
        form = self.get_form(instance)
        try:
            with transaction.atomic():
                saved = form.submit(request.data)
        except DatabaseError:
            logger.exception("Composite form save failed", form=type(form).__name__, action=form.action)
            raise

        if not saved:
            return Response({'errors': form.error_messages()}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_schema(form), status=success_status)
