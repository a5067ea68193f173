"""Immutable document snapshot items handed out by the document store."""

from typing import Any, Dict

from pydantic import BaseModel


class Document(BaseModel):
    id: str
    data: Dict[str, Any]

    model_config = {"frozen": True}

    def get(self, field: str, default: Any = None) -> Any:
        return self.data.get(field, default)
