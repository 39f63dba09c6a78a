from enum import Enum


class SpecificationOperator(str, Enum):
    """Operators a compiled predicate may use."""

    # Standard comparison
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    IN = "in"
    NOT_IN = "not_in"

    # Null checks
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    # Logical operators
    AND = "and"
    OR = "or"
    NOT = "not"
