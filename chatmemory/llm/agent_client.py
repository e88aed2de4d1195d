"""Completion service backed by an agent_framework ChatAgent.

Mode 1 (registry=None): Use env settings (AzOpenAIEnvSettings) for local dev
Mode 2 (registry provided): Use ModelRegistry for cloud deployment
"""

import logging
from typing import List, Optional

from agent_framework import ChatAgent, ChatMessage, Role
from agent_framework.azure import AzureOpenAIChatClient

from chatmemory.errors import CompletionServiceError

from .base import CompletionService, Prompt
from .model_registry import AzOpenAIEnvSettings, ModelRegistry

logger = logging.getLogger(__name__)


def create_chat_agent(
    name: str,
    description: str,
    registry: Optional[ModelRegistry] = None,
    model_name: Optional[str] = None,
    instructions: Optional[str] = None,
) -> ChatAgent:
    """Create ChatAgent with model configuration.

    Args:
        name: Agent name
        description: Agent description
        registry: ModelRegistry for cloud mode, None for env settings
        model_name: Model to use (required when registry provided)
        instructions: Optional system prompt

    Returns:
        Configured ChatAgent instance

    Raises:
        ValueError: If registry is provided but model_name is None
    """
    if registry is None:
        env = AzOpenAIEnvSettings()
        api_key = env.azure_openai_api_key
        endpoint = env.azure_openai_endpoint
        deployment_name = env.azure_openai_deployment_name
    else:
        if model_name is None:
            raise ValueError("model_name is required when registry is provided")
        resolved = registry.get(model_name)
        api_key = resolved.api_key
        endpoint = resolved.endpoint
        deployment_name = resolved.deployment_name

    chat_client = AzureOpenAIChatClient(
        api_key=api_key,
        endpoint=endpoint,
        deployment_name=deployment_name,
    )

    return ChatAgent(
        name=name,
        description=description,
        instructions=instructions,
        chat_client=chat_client,
    )


class AgentCompletionService(CompletionService):
    """CompletionService that runs every prompt through one ChatAgent.

    The agent carries no instructions: the persona travels inside the
    context as the leading user entry.
    """

    def __init__(self, agent: ChatAgent):
        self.agent = agent

    @staticmethod
    def to_messages(prompt: Prompt) -> List[ChatMessage]:
        """Convert a prompt or context entries to agent_framework messages."""
        if isinstance(prompt, str):
            return [ChatMessage(Role.USER, text=prompt)]
        return [
            ChatMessage(Role.USER if entry.speaker == "user" else Role.ASSISTANT, text=entry.text)
            for entry in prompt
        ]

    async def complete(self, prompt: Prompt) -> str:
        messages = self.to_messages(prompt)
        if not messages:
            raise CompletionServiceError("Nothing to complete")

        try:
            response = await self.agent.run(messages=messages)
        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise CompletionServiceError(f"Completion request failed: {e}") from e

        text = response.text or ""
        if not text.strip():
            raise CompletionServiceError("Completion service returned an empty response")
        return text


def create_completion_service(
    registry: Optional[ModelRegistry] = None,
    model_name: Optional[str] = None,
) -> AgentCompletionService:
    """Create the process-wide completion service.

    Args:
        registry: ModelRegistry for cloud mode, None for env settings
        model_name: Model to use (only when registry provided)
    """
    agent = create_chat_agent(
        name="chat-memory-agent",
        description="Answers chat turns and maintains conversation memory",
        registry=registry,
        model_name=model_name,
    )
    return AgentCompletionService(agent)
