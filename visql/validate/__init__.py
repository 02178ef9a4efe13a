"""visql validation layer: structural checks run before compilation."""
from visql.validate.validator import QueryValidator

__all__ = ["QueryValidator"]
