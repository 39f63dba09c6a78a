from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from .base import BaseSpecification
from .operators import SpecificationOperator

if TYPE_CHECKING:
    from .evaluator import MemoryOperatorRegistry

T = TypeVar("T", contravariant=True)


class AttributeSpecification(BaseSpecification[T]):
    """
    Specification that checks a single store field.

    Delegates in-memory evaluation to a :class:`MemoryOperatorRegistry`
    (strategy pattern). The registry is injected explicitly so predicates
    built at request time share the process-wide operator table.
    """

    def __init__(
        self,
        attr: str,
        op: SpecificationOperator | str,
        val: Any,
        *,
        registry: MemoryOperatorRegistry,
    ) -> None:
        if registry is None:
            raise ValueError(
                "registry parameter is required. "
                "Use build_default_registry() from operators_memory to create one."
            )
        self.attr = attr
        self.op = SpecificationOperator(op) if isinstance(op, str) else op
        self.val = val
        self._registry = registry

    def is_satisfied_by(self, candidate: T) -> bool:
        actual_val = self._resolve_field(candidate, self.attr)
        return self._registry.evaluate(self.op, actual_val, self.val)

    @staticmethod
    def _resolve_field(obj: Any, attr_path: str) -> Any:
        """
        Resolve a dot-separated path on *obj*.

        Supports nested documents (``tag.externalId``) on both mappings and
        attribute-bearing objects.
        """
        for part in attr_path.split("."):
            if obj is None:
                return None
            obj = obj.get(part) if isinstance(obj, dict) else getattr(obj, part, None)
        return obj

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op.value,
            "attr": self.attr,
            "val": self.val,
        }

    def __repr__(self) -> str:
        return f"AttributeSpecification({self.attr!r}, {self.op.value!r}, {self.val!r})"
