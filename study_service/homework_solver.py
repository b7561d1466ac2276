"""
homework_solver.py - Step-by-step homework solutions
"""

import json
import logging

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from .content_generator import ContentGenerator
from .llm_utils import extract_json_from_response
from .models import HomeworkRequest, HomeworkSolution, TargetAudience

_LOG = logging.getLogger("homework_solver")

AUDIENCE_CONTEXT = {
    TargetAudience.MIDDLE_SCHOOL: (
        "Explain concepts simply, as if teaching a middle school student. "
        "Use basic vocabulary and relatable examples."
    ),
}
DEFAULT_AUDIENCE_CONTEXT = (
    "Provide detailed explanations suitable for high school or college level. "
    "Use proper mathematical notation and terminology."
)


class HomeworkSolver(ContentGenerator):
    """Solves a homework question, optionally from an image."""

    name = "solve-homework"

    def build_messages(self, request: HomeworkRequest) -> list:
        audience_context = AUDIENCE_CONTEXT.get(
            TargetAudience(request.target_audience), DEFAULT_AUDIENCE_CONTEXT
        )
        if request.question_specifier:
            question_context = f"The user specifically wants help with: {request.question_specifier}"
        else:
            question_context = "Solve all problems shown."

        system_prompt = self.render_prompt(
            "homework_system.md",
            audience_context=audience_context,
            question_context=question_context,
        )
        messages = [SystemMessage(content=system_prompt)]

        if request.image_url:
            text = request.question.strip() or "Please solve this problem from the image."
            messages.append(HumanMessage(content=[
                {"type": "text", "text": text},
                {"type": "image_url", "image_url": {"url": request.image_url}},
            ]))
        else:
            messages.append(HumanMessage(content=request.question))
        return messages

    def solve(self, request: HomeworkRequest) -> HomeworkSolution:
        content = self.invoke(self.build_messages(request))
        return parse_solution(content)


def parse_solution(content: str) -> HomeworkSolution:
    """Parse the model reply, falling back to the raw text as the answer."""
    try:
        data = json.loads(extract_json_from_response(content))
        if not isinstance(data, dict):
            raise ValueError("Solution is not a JSON object")
        steps = data.get("steps") or []
        if isinstance(steps, list):
            steps = [str(step) for step in steps]
        else:
            # A single block of text is one step
            steps = [str(steps)]
        final_answer = data.get("finalAnswer") or data.get("final_answer") or "See steps above"
        return HomeworkSolution(steps=steps, final_answer=str(final_answer))
    except (ValueError, ValidationError) as e:
        _LOG.warning("Failed to parse AI response, using raw content: %s", e)
        return HomeworkSolution(steps=["The AI provided a solution:"], final_answer=content.strip())
