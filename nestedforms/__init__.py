"""
nestedforms: one Django form over a primary model, delegated models and
nested sub-forms, validated and saved as a unit.
"""
from .Core import (
    CompositeForm,
    DelegateForm,
    DelegateModel,
    FormEntry,
    FormStore,
    FormStoreBuilder,
    ModelEntry,
    PresenceRule,
    SubmissionState,
    NestedParams,
    ScalarParam,
    build_param_tree,
    CompositeFormError,
    DelegationDeclarationError,
    TargetLookupError,
    PrimaryModelMissingError,
)
from .Schema import FormSchemaBuilder, CompositeFormSchemaBuilder

__all__ = [
    'CompositeForm',
    'DelegateForm',
    'DelegateModel',
    'FormEntry',
    'FormStore',
    'FormStoreBuilder',
    'ModelEntry',
    'PresenceRule',
    'SubmissionState',
    'NestedParams',
    'ScalarParam',
    'build_param_tree',
    'CompositeFormError',
    'DelegationDeclarationError',
    'TargetLookupError',
    'PrimaryModelMissingError',
    'FormSchemaBuilder',
    'CompositeFormSchemaBuilder',
]

__version__ = '0.1.0'
