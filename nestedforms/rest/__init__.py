"""
Django REST framework surface for composite forms.
"""
from .views import CompositeFormView
