"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

from launchpath.ai.client import AIClient, AnthropicClient
from launchpath.ai.handler import ConversationEngine
from launchpath.ai.tools.registry import ToolDependencies, ToolRegistry
from launchpath.config import AppConfig
from launchpath.log import get_logger
from launchpath.server.workflow_streams import WorkflowStreams
from launchpath.storage.database import Database
from launchpath.storage.system_repo import SystemRepository
from launchpath.workflows.demo import DemoWorkflow
from launchpath.workflows.niche import NicheAnalyzer
from launchpath.workflows.offer import OfferWorkflow
from launchpath.workflows.pregenerate import OfferPregenerator

logger = get_logger(__name__)


class LaunchPathApp:
    """Top-level application orchestrator.

    ``ai_client`` may be injected (tests use a scripted fake); otherwise the
    Anthropic backend is built from the config.
    """

    def __init__(self, config: AppConfig, ai_client: AIClient | None = None):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.repo = SystemRepository(self.db)
        self.ai_client = ai_client or self._create_ai_client()

        retries = config.workflows.max_quality_retries
        model = config.ai.structured_model
        self.niche_analyzer = NicheAnalyzer(self.ai_client, retries, model)
        self.offer_workflow = OfferWorkflow(self.ai_client, retries, model)
        self.demo_workflow = DemoWorkflow(self.ai_client, retries, model)
        self.pregenerator = OfferPregenerator(self.repo, self.offer_workflow)
        self.workflow_streams = WorkflowStreams(self.repo, self.offer_workflow, self.demo_workflow)

        self.tool_registry = ToolRegistry()
        self.tool_registry.discover_and_register(
            ToolDependencies(
                config=config,
                ai_client=self.ai_client,
                niche_analyzer=self.niche_analyzer,
                offer_workflow=self.offer_workflow,
                demo_workflow=self.demo_workflow,
                pregenerator=self.pregenerator,
            )
        )
        self.engine = ConversationEngine(self.ai_client, self.tool_registry, self.repo, config.ai)

    async def start(self) -> None:
        await self.db.initialize()
        logger.info("launchpath_started", tools=len(self.tool_registry.all_tools()))

    async def stop(self) -> None:
        """Cancel in-flight background work, then close the database."""
        await self.pregenerator.shutdown()
        await self.workflow_streams.shutdown()
        await self.engine.shutdown()
        await self.db.close()
        logger.info("launchpath_stopped")

    def _create_ai_client(self) -> AIClient:
        if not self.config.anthropic:
            raise ValueError("No 'anthropic' section in config; cannot create the AI client")
        return AnthropicClient(self.config.anthropic, self.config.ai)
