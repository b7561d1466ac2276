"""
flashcard_generator.py - Flashcard generation from notes or images
"""

import logging
from typing import List

from langchain_core.messages import HumanMessage, SystemMessage

from .content_generator import ContentGenerator, parse_json_array
from .errors import GenerationFailedError
from .llm_utils import image_content_part
from .models import MAX_FLASHCARDS, Flashcard, FlashcardGenerationRequest, GeneratedFlashcards

_LOG = logging.getLogger("flashcard_generator")


class FlashcardGenerator(ContentGenerator):
    """Generates up to 20 front/back cards."""

    name = "generate-flashcards"

    def build_messages(self, request: FlashcardGenerationRequest) -> list:
        if request.image_data:
            text = self.render_prompt("flashcards_image.md")
            return [HumanMessage(content=[
                {"type": "text", "text": text},
                image_content_part(request.image_data),
            ])]

        return [
            SystemMessage(content=(
                "You are a helpful study assistant that creates effective flashcards from notes. "
                "Always respond with valid JSON only."
            )),
            HumanMessage(content=self.render_prompt("flashcards_notes.md", notes=request.notes)),
        ]

    def generate(self, request: FlashcardGenerationRequest) -> GeneratedFlashcards:
        content = self.invoke(self.build_messages(request))
        cards = validate_flashcards(parse_json_array(content))
        if not cards:
            raise GenerationFailedError("AI response contained no usable flashcards")

        _LOG.info("Generated %d flashcards", len(cards))
        return GeneratedFlashcards(flashcards=cards)


def validate_flashcards(raw_cards: list) -> List[Flashcard]:
    """Drop cards missing a front or back and keep at most 20."""
    cards = []
    for raw in raw_cards:
        if not isinstance(raw, dict):
            continue
        front = str(raw.get("front") or "").strip()
        back = str(raw.get("back") or "").strip()
        if not front or not back:
            continue
        cards.append(Flashcard(front=front, back=back))
        if len(cards) >= MAX_FLASHCARDS:
            break
    return cards
