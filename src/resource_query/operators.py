from enum import Enum


class FilterOperator(str, Enum):
    """Comparison kinds a request parameter can be translated into."""

    # Standard comparison
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="

    # Set membership
    IN = "in"
    NOT_IN = "not_in"

    # String operations
    LIKE = "like"

    # Null checks
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
