"""
Core components for composite form composition.
"""
from .CompositeForm import CompositeForm
from .Delegations import DelegateForm, DelegateModel
from .FormStore import FormEntry, FormStore, FormStoreBuilder, ModelEntry, PresenceRule
from .Lifecycle import SubmissionState
from .Params import NestedParams, ScalarParam, build_param_tree
from .exceptions import (
    CompositeFormError,
    DelegationDeclarationError,
    TargetLookupError,
    PrimaryModelMissingError,
)
