"""
Generator Module

WHAT THIS DOES:
Takes a visitor's question + the retrieved profile passages and asks the
chat model to answer as the profile owner. This is the "G" in RAG.

THE PROMPT:
┌─────────────────────────────────────────────────┐
│ SYSTEM MESSAGE                                  │
│ - Role: "You are <name>"                        │
│ - Only use the provided context                 │
│ - Say "No" when the context has no answer       │
└─────────────────────────────────────────────────┘
                    +
┌─────────────────────────────────────────────────┐
│ USER MESSAGE                                    │
│ - "Context from profile:" + passages (if any)   │
│ - The question                                  │
│ - The instructions again, closest to the answer │
└─────────────────────────────────────────────────┘

An empty context is normal (nothing relevant, or retrieval failed). The
question is still sent, just without a context block.
"""

from typing import Any, List, Optional
from dataclasses import dataclass
import openai
from openai import AsyncAzureOpenAI, AsyncOpenAI

from config.settings import Settings, get_settings
from careerbot.exceptions import GenerationError


SYSTEM_PROMPT_TEMPLATE = """
ROLE
You are {name}.

TASK
Use the provided context to answer user questions.

INSTRUCTIONS
- Use only the provided context to answer questions.
- If the context does not contain the answer, respond with "No".
- Keep responses concise and relevant.
- Respond as if you are {name}.
"""


def build_system_prompt(name: str) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(name=name)


def build_user_message(question: str, context: List[str], system_prompt: str) -> str:
    """
    Build the user message with context and question.

    WHY CONTEXT FIRST:
    - The model reads the passages before it is asked anything
    """
    if context:
        joined = "\n\n".join(context)
        return (
            f"Context from profile:\n{joined}\n\n"
            f"User question:\n{question}\n\n"
            f"{system_prompt}"
        )

    return f"User question:\n{question}\n\n{system_prompt}"


@dataclass
class GenerationResult:
    """
    Result of generating an answer.

    - answer: What we show the user
    - context: The passages the answer was grounded on
    - model: Debugging and cost tracking
    - usage: Token consumption
    """
    answer: str
    context: List[str]
    model: str
    usage: dict
    prompt: Optional[str] = None  # For debugging


class Generator:
    """Answer questions about the profile with an OpenAI-compatible chat model."""

    def __init__(
        self,
        name: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
        system_prompt: Optional[str] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the generator.

        Args:
            name: Who the bot speaks as (defaults to settings)
            model: Chat model name (defaults to settings)
            client: Pre-built AsyncOpenAI-like client, mostly for tests
            system_prompt: Custom system prompt (defaults to the persona prompt)
            settings: Settings to read defaults from (defaults to get_settings())
        """
        if client is None or model is None or name is None:
            settings = settings or get_settings()
            provider = settings.provider
            name = name or settings.profile.name
            model = model or provider.llm_model

            if client is None and provider.use_azure:
                client = AsyncAzureOpenAI(
                    azure_endpoint=provider.azure_endpoint,
                    api_key=provider.azure_api_key,
                    api_version=provider.azure_api_version
                )
            elif client is None:
                client = AsyncOpenAI(api_key=provider.api_key, base_url=provider.base_url)

        self.name = name
        self.model = model
        self.client = client
        self.system_prompt = system_prompt or build_system_prompt(name)

    async def generate(
        self,
        question: str,
        context: List[str],
        include_prompt_in_result: bool = False
    ) -> GenerationResult:
        """
        Generate an answer based on retrieved context.

        Raises:
            GenerationError: if the chat call fails or returns no choices
        """
        user_message = build_user_message(question, context, self.system_prompt)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": user_message}
                ]
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"Chat completion failed: {e}") from e

        choices = getattr(response, "choices", None)
        if not choices:
            raise GenerationError("Chat completion returned no choices")

        usage = getattr(response, "usage", None)

        return GenerationResult(
            answer=choices[0].message.content or "",
            context=list(context),
            model=self.model,
            usage={
                "prompt_tokens": getattr(usage, "prompt_tokens", 0) or 0,
                "completion_tokens": getattr(usage, "completion_tokens", 0) or 0,
                "total_tokens": getattr(usage, "total_tokens", 0) or 0
            },
            prompt=user_message if include_prompt_in_result else None
        )

    async def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
