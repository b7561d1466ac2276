"""
quiz_generator.py - Multiple-choice quiz generation
"""

import logging
from typing import List

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from .content_generator import ContentGenerator, parse_json_array
from .errors import GenerationFailedError
from .llm_utils import image_content_part
from .models import GeneratedQuiz, QuizGenerationRequest, QuizQuestion

_LOG = logging.getLogger("quiz_generator")


class QuizGenerator(ContentGenerator):
    """Generates quiz questions from a topic, notes or an image."""

    name = "generate-quiz"

    def build_messages(self, request: QuizGenerationRequest) -> list:
        system_prompt = self.render_prompt("quiz_system.md", question_count=request.question_count)
        messages = [SystemMessage(content=system_prompt)]

        if request.image_data:
            _LOG.info("Processing image-based quiz generation")
            text = (
                f"Create {request.question_count} quiz questions based on the content in this image. "
                "Focus on key concepts, facts, and important details visible in the image."
            )
            messages.append(HumanMessage(content=[
                {"type": "text", "text": text},
                image_content_part(request.image_data),
            ]))
        elif request.notes and request.notes.strip():
            _LOG.info("Processing notes-based quiz generation")
            messages.append(HumanMessage(
                content=f"Create {request.question_count} quiz questions based on these notes:\n\n{request.notes}"
            ))
        else:
            _LOG.info("Processing topic-based quiz generation")
            messages.append(HumanMessage(
                content=f"Create {request.question_count} quiz questions about: {request.topic}"
            ))
        return messages

    def generate(self, request: QuizGenerationRequest) -> GeneratedQuiz:
        content = self.invoke(self.build_messages(request))
        questions = validate_questions(parse_json_array(content), request.question_count)
        if not questions:
            raise GenerationFailedError("AI response contained no usable questions")

        _LOG.info("Generated %d questions", len(questions))
        return GeneratedQuiz(questions=questions)


def validate_questions(raw_questions: list, limit: int) -> List[QuizQuestion]:
    """Keep well-formed questions, up to ``limit``. Malformed ones are dropped."""
    valid = []
    for raw in raw_questions:
        if not isinstance(raw, dict):
            continue
        try:
            question = QuizQuestion.model_validate(raw)
        except ValidationError:
            _LOG.debug("Dropping malformed question: %s", raw)
            continue
        if not question.is_well_formed():
            _LOG.debug("Dropping malformed question: %s", raw)
            continue
        valid.append(QuizQuestion(
            question=question.question.strip(),
            options=[str(option).strip() for option in question.options],
            correct_answer=question.correct_answer,
            explanation=(question.explanation or "").strip() or "No explanation provided.",
        ))
        if len(valid) >= limit:
            break
    return valid
