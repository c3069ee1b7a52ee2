"""AI gateway: single-shot calls to the language model for the study modules."""

import json
from collections.abc import Sequence
from typing import Any

import structlog
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from edumind.errors import GatewayError
from edumind.gateway.prompts import load_prompts
from edumind.models.chat import Attachment, ChatMessage
from edumind.models.plan import DailyPlan
from edumind.models.quiz import Difficulty, QuizQuestion

logger = structlog.get_logger()


class _QuizPayload(BaseModel):
    questions: list[QuizQuestion]


class _PlanPayload(BaseModel):
    plan: list[DailyPlan]


def build_message_parts(
    text: str, attachment: Attachment | None, attachment_prompt: str
) -> list[dict[str, Any]]:
    """Build the content parts of a user turn: inlined attachment, then text."""
    parts: list[dict[str, Any]] = []
    if attachment is not None:
        data_url = f"data:{attachment.mime_type};base64,{attachment.data}"
        if attachment.is_image:
            parts.append({"type": "image_url", "image_url": {"url": data_url}})
        else:
            parts.append({
                "type": "file",
                "file": {"filename": attachment.name, "file_data": data_url},
            })
    if text.strip():
        parts.append({"type": "text", "text": text})
    elif attachment is not None:
        parts.append({"type": "text", "text": attachment_prompt})
    return parts


class StudyGateway:
    """Wraps the chat completions API for chat, quizzes, summaries and plans.

    Every call returns the whole result or raises GatewayError; nothing is
    retried.

    Args:
        api_key: OpenAI API key.
        chat_model: Model answering tutor chat messages.
        generation_model: Model generating quizzes, summaries and plans.
        prompts: Prompt templates; defaults to config/prompts/gateway.yaml.
        client: Preconfigured client, mainly for tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        chat_model: str = "gpt-4o-mini",
        generation_model: str = "gpt-4o-mini",
        prompts: dict[str, dict[str, str]] | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.chat_model = chat_model
        self.generation_model = generation_model
        self.prompts = prompts or load_prompts()

    @property
    def attachment_prompt(self) -> str:
        return self.prompts["doubt_solving"]["attachment_prompt"]

    async def _complete(self, operation: str, json_mode: bool = False, **kwargs) -> str:
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            logger.error("gateway_request_failed", operation=operation, error=str(e))
            raise GatewayError(f"{operation} request failed") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.error("gateway_empty_response", operation=operation)
            raise GatewayError(f"{operation} returned no content")
        return content

    def _parse(self, operation: str, content: str, payload_type: type[BaseModel]):
        try:
            return payload_type.model_validate(json.loads(content))
        except (ValueError, ValidationError) as e:
            logger.error("gateway_malformed_response", operation=operation, error=str(e))
            raise GatewayError(f"{operation} returned malformed data") from e

    async def solve_doubt(
        self, history: Sequence[ChatMessage], parts: list[dict[str, Any]]
    ) -> str:
        """Answer a new user turn given the prior conversation.

        Args:
            history: Previous messages, oldest first.
            parts: Content parts of the new user message.

        Returns:
            The tutor's reply text.
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": self.prompts["doubt_solving"]["system_prompt"]},
        ]
        for m in history:
            role = "assistant" if m.role == "model" else "user"
            messages.append({"role": role, "content": m.text})
        messages.append({"role": "user", "content": parts})

        reply = await self._complete(
            "doubt_solving", model=self.chat_model, messages=messages
        )
        logger.info("doubt_solved", history_length=len(history))
        return reply

    async def generate_quiz(
        self, topic: str, difficulty: Difficulty, count: int
    ) -> list[QuizQuestion]:
        section = self.prompts["quiz"]
        content = await self._complete(
            "quiz",
            json_mode=True,
            model=self.generation_model,
            messages=[
                {"role": "system", "content": section["system_prompt"]},
                {
                    "role": "user",
                    "content": section["user_prompt"].format(
                        count=count, topic=topic, difficulty=Difficulty(difficulty).value
                    ),
                },
            ],
        )
        questions = self._parse("quiz", content, _QuizPayload).questions
        if len(questions) != count:
            logger.warning("quiz_count_mismatch", requested=count, received=len(questions))
        logger.info("quiz_generated", topic=topic, count=len(questions))
        return questions

    async def summarize_notes(self, text: str) -> str:
        summary = await self._complete(
            "summary",
            model=self.generation_model,
            messages=[
                {"role": "user", "content": self.prompts["summary"]["user_prompt"].format(text=text)},
            ],
        )
        logger.info("notes_summarized", input_length=len(text))
        return summary

    async def generate_study_plan(
        self, exam_name: str, days: int, hours: int
    ) -> list[DailyPlan]:
        section = self.prompts["plan"]
        content = await self._complete(
            "plan",
            json_mode=True,
            model=self.generation_model,
            messages=[
                {"role": "system", "content": section["system_prompt"]},
                {
                    "role": "user",
                    "content": section["user_prompt"].format(
                        exam_name=exam_name, days=days, hours=hours
                    ),
                },
            ],
        )
        plan = self._parse("plan", content, _PlanPayload).plan
        logger.info("study_plan_generated", exam_name=exam_name, days=len(plan))
        return plan
