"""Abstract tool interface for model tool use."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any

from launchpath.core.context import ToolContext


class ToolCategory(StrEnum):
    INPUT_REQUEST = "input_request"
    DYNAMIC = "dynamic"
    SAVE = "save"
    ACTION = "action"
    DISPLAY = "display"
    UTILITY = "utility"


class Tool(ABC):
    """Base class for all model-callable tools."""

    category: ToolCategory = ToolCategory.UTILITY

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name sent to the Anthropic API."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Description shown to the model."""
        ...

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema dict describing accepted parameters."""
        return {"type": "object", "properties": {}}

    @abstractmethod
    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        """Run the tool for one conversation turn and return a JSON-able result."""
        ...

    def to_api_dict(self) -> dict[str, Any]:
        """Serialize to the Anthropic API tool definition format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }
