from typing import Any, Iterable, Mapping, Optional
from pydantic import BaseModel

from storefront.domain.exceptions import EmptyPatchError


class Patch:
    """Частичное обновление: только явно переданные поля попадают в UPDATE"""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, Any] = dict(values or {})

    @classmethod
    def from_model(
        cls,
        model: BaseModel,
        nullable: Iterable[str] = ()
    ) -> "Patch":
        """Явный null допустим только для полей из nullable, остальные null пропускаются"""
        nullable = set(nullable)
        patch = cls()
        for field, value in model.model_dump(exclude_unset=True).items():
            if value is None and field not in nullable:
                continue
            patch.set(field, value)
        return patch

    def set(self, field: str, value: Any) -> "Patch":
        self._values[field] = value
        return self

    def __contains__(self, field: str) -> bool:
        return field in self._values

    def __bool__(self) -> bool:
        return bool(self._values)

    def get(self, field: str, default: Any = None) -> Any:
        return self._values.get(field, default)

    def values(self) -> dict[str, Any]:
        if not self._values:
            raise EmptyPatchError("Нет полей для обновления")
        return dict(self._values)
