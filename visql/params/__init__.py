"""visql parameter layer: ``:name`` placeholder substitution."""
from visql.params.resolver import ParameterResolver

__all__ = ["ParameterResolver"]
