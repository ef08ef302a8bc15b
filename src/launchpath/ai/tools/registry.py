"""Tool registry for discovering and managing available tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from launchpath.ai.client import AIClient
from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.config import AppConfig
from launchpath.log import get_logger
from launchpath.workflows.demo import DemoWorkflow
from launchpath.workflows.niche import NicheAnalyzer
from launchpath.workflows.offer import OfferWorkflow
from launchpath.workflows.pregenerate import OfferPregenerator

logger = get_logger(__name__)


@dataclass
class ToolDependencies:
    """Long-lived services the built-in tools are constructed with."""

    config: AppConfig
    ai_client: AIClient
    niche_analyzer: NicheAnalyzer
    offer_workflow: OfferWorkflow
    demo_workflow: DemoWorkflow
    pregenerator: OfferPregenerator


class ToolRegistry:
    """Registry of all available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug("tool_registered", tool_name=tool.name, category=tool.category)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def by_category(self, category: ToolCategory) -> list[Tool]:
        return [t for t in self._tools.values() if t.category == category]

    def all_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def api_definitions(self) -> list[dict[str, Any]]:
        return [t.to_api_dict() for t in self._tools.values()]

    def discover_and_register(self, deps: ToolDependencies) -> None:
        """Import and register all built-in tools."""
        from launchpath.ai.tools.analysis import RunNicheAnalysisTool
        from launchpath.ai.tools.dynamic import PresentChoicesTool, RequestInputTool
        from launchpath.ai.tools.input_request import input_request_tools
        from launchpath.ai.tools.interpret import InterpretFreeformTool
        from launchpath.ai.tools.offer import (
            GenerateOfferTool,
            ShowOfferPricingTool,
            ShowOfferReviewTool,
            ShowOfferStoryTool,
        )
        from launchpath.ai.tools.save import (
            SaveCollectedAnswersTool,
            SaveNicheChoiceTool,
            SaveOfferSectionTool,
        )
        from launchpath.ai.tools.system import GenerateSystemTool

        for tool in input_request_tools():
            self.register(tool)
        self.register(PresentChoicesTool())
        self.register(RequestInputTool())

        self.register(SaveCollectedAnswersTool())
        self.register(SaveNicheChoiceTool(deps.pregenerator))
        self.register(SaveOfferSectionTool())
        self.register(InterpretFreeformTool(deps.ai_client, deps.config.ai.fast_model))

        self.register(
            RunNicheAnalysisTool(deps.niche_analyzer, deps.config.workflows.niche_progress_seconds)
        )
        self.register(GenerateOfferTool(deps.offer_workflow))
        self.register(ShowOfferStoryTool())
        self.register(ShowOfferPricingTool())
        self.register(ShowOfferReviewTool())
        self.register(GenerateSystemTool(deps.demo_workflow))

        logger.info("tools_registered", count=len(self._tools))
