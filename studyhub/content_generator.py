"""
Content Generation Pipeline for StudyHub.

Turns document or summary text into study artifacts:
- summaries (concise, detailed, bullet, sectioned) with optional key terms
- multiple-choice quizzes sized by difficulty
- front/back flashcard batches

Generators are stateless and never touch storage, so callers can re-run
them freely. ``PlaceholderContentGenerator`` is deterministic and needs no
network; ``LLMContentGenerator`` implements the same contract on top of an
``LLMProvider``.
"""

import asyncio
import json
import logging
import math
import re
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from .constants import (
    FLASHCARD_BATCH_SIZE,
    QUESTIONS_PER_DIFFICULTY,
    QUIZ_OPTION_IDS,
    WORDS_PER_MINUTE,
)
from .exceptions import GenerationError, LLMResponseParseError
from .llm_providers import LLMProvider, OpenAIProvider
from .models import Difficulty, KeyTerm, QuizOption, QuizQuestion, Readability, SummaryFormat

logger = logging.getLogger(__name__)

STOPWORDS = {
    "about", "after", "again", "their", "there", "these", "those", "which",
    "while", "where", "would", "could", "should", "other", "being", "because",
    "before", "between", "through", "under", "since", "until", "within",
}


@dataclass
class SummaryOptions:
    format: SummaryFormat = SummaryFormat.CONCISE
    readability: Readability = Readability.SIMPLE
    extract_key_terms: bool = False


@dataclass
class SummaryResult:
    """Result from summarization."""
    content: str
    key_terms: List[KeyTerm] = field(default_factory=list)
    read_time: int = 1


@dataclass
class QuizDraft:
    title: str
    difficulty: Difficulty
    questions: List[QuizQuestion]


@dataclass
class FlashcardDraft:
    front: str
    back: str


# =============================================================================
# Text helpers
# =============================================================================

def count_words(text: str) -> int:
    return len(text.split())


def estimate_read_time(text: str) -> int:
    """Minutes needed to read ``text`` at 200 words per minute, at least 1."""
    return max(1, math.ceil(count_words(text) / WORDS_PER_MINUTE))


def split_sentences(text: str) -> List[str]:
    sentences = re.split(r"(?<=[.!?])\s+", text.strip())
    return [s.strip() for s in sentences if s.strip()]


def top_terms(text: str, limit: int) -> List[str]:
    """Most frequent content words, ties broken by first appearance."""
    words = re.findall(r"[A-Za-z][A-Za-z'-]{4,}", text)
    counts = Counter(w.lower() for w in words if w.lower() not in STOPWORDS)
    return [term for term, _ in counts.most_common(limit)]


def question_count(difficulty: Difficulty) -> int:
    return QUESTIONS_PER_DIFFICULTY[Difficulty(difficulty).value]


# =============================================================================
# Generator contract
# =============================================================================

class ContentGenerator(ABC):
    """Stateless transformation of text into study artifacts."""

    @abstractmethod
    async def summarize(
        self,
        text: str,
        title: str,
        options: SummaryOptions
    ) -> SummaryResult:
        """
        Summarize document text.

        Args:
            text: Extracted document text
            title: Document title
            options: Format, readability and key-term extraction flags

        Returns:
            SummaryResult; ``key_terms`` is empty unless requested
        """
        pass

    @abstractmethod
    async def generate_quiz(
        self,
        summary_text: str,
        title: str,
        difficulty: Difficulty
    ) -> QuizDraft:
        """
        Build a multiple-choice quiz (5, 8 or 10 questions by difficulty).
        """
        pass

    @abstractmethod
    async def generate_flashcards(self, summary_text: str, title: str) -> List[FlashcardDraft]:
        """Build a fixed-size batch of front/back pairs."""
        pass


# =============================================================================
# Placeholder generator
# =============================================================================

class PlaceholderContentGenerator(ContentGenerator):
    """
    Deterministic generator used when no language model is configured.

    Output is derived from the input text where possible and padded with
    template text otherwise, so every call honours the size contract.
    """

    def __init__(self, delay_seconds: float = 0.0):
        self.delay_seconds = delay_seconds

    async def _simulate_work(self) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

    async def summarize(
        self,
        text: str,
        title: str,
        options: SummaryOptions
    ) -> SummaryResult:
        logger.info(f"Generating {SummaryFormat(options.format).value} summary for: {title}")
        await self._simulate_work()

        builders = {
            SummaryFormat.CONCISE: self._concise,
            SummaryFormat.DETAILED: self._detailed,
            SummaryFormat.BULLET: self._bullet,
            SummaryFormat.SECTIONED: self._sectioned,
        }
        build = builders.get(SummaryFormat(options.format), self._concise)
        content = build(text, title, Readability(options.readability))

        key_terms = self._key_terms(text, title) if options.extract_key_terms else []

        return SummaryResult(
            content=content,
            key_terms=key_terms,
            read_time=estimate_read_time(text),
        )

    async def generate_quiz(
        self,
        summary_text: str,
        title: str,
        difficulty: Difficulty
    ) -> QuizDraft:
        difficulty = Difficulty(difficulty)
        logger.info(f"Generating {difficulty.value} quiz for: {title}")
        await self._simulate_work()

        sentences = split_sentences(summary_text)
        questions = []
        for i in range(question_count(difficulty)):
            correct = QUIZ_OPTION_IDS[i % len(QUIZ_OPTION_IDS)]
            basis = sentences[i] if i < len(sentences) else None
            options = []
            for option_id in QUIZ_OPTION_IDS:
                if option_id == correct and basis:
                    text = basis
                else:
                    text = f"Answer option {option_id.upper()}"
                options.append(QuizOption(id=option_id, text=text))

            questions.append(QuizQuestion(
                id=i,
                question=f"Sample question {i + 1} about {title}?",
                options=options,
                correct_answer=correct,
            ))

        return QuizDraft(title=f"Quiz on {title}", difficulty=difficulty, questions=questions)

    async def generate_flashcards(self, summary_text: str, title: str) -> List[FlashcardDraft]:
        logger.info(f"Generating flashcards for: {title}")
        await self._simulate_work()

        terms = top_terms(summary_text, FLASHCARD_BATCH_SIZE)
        sentences = split_sentences(summary_text)

        cards = []
        for i in range(FLASHCARD_BATCH_SIZE):
            if i < len(terms):
                term = terms[i]
                context = next((s for s in sentences if term in s.lower()), None)
                cards.append(FlashcardDraft(
                    front=f"What does the summary of {title} say about '{term}'?",
                    back=context or f"Definition for term {i + 1}",
                ))
            else:
                cards.append(FlashcardDraft(
                    front=f"Sample term {i + 1} from {title}",
                    back=f"Definition for term {i + 1}",
                ))
        return cards

    # -------------------------------------------------------------------------
    # Summary formats
    # -------------------------------------------------------------------------

    @staticmethod
    def _lead(readability: Readability, simple: str, academic: str) -> str:
        return academic if readability == Readability.ACADEMIC else simple

    def _concise(self, text: str, title: str, readability: Readability) -> str:
        paragraphs = [p for p in text.split("\n\n") if p.strip()]
        first = paragraphs[0].strip() if paragraphs else ""
        lead = self._lead(
            readability,
            "This is a concise summary of the document.",
            f"The following constitutes a concise synthesis of \"{title}\".",
        )
        excerpt = first[:200]
        return f"{lead} {excerpt}..." if excerpt else lead

    def _detailed(self, text: str, title: str, readability: Readability) -> str:
        sentences = split_sentences(text)
        lead = self._lead(
            readability,
            "This is a detailed summary of the document. It walks through the main "
            "points, arguments, and conclusions in plain language.",
            "This detailed summary provides a comprehensive account of the principal "
            "propositions, supporting arguments, and conclusions advanced in the text.",
        )
        body = " ".join(sentences[:5]) or (
            "Key points from the document would be highlighted, and important concepts "
            "would be explained in depth."
        )
        closing = (
            "The summary keeps the logical flow of the original document while "
            "condensing the information into a more digestible format."
        )
        return "\n\n".join([lead, body, closing])

    def _bullet(self, text: str, title: str, readability: Readability) -> str:
        sentences = split_sentences(text)[:8]
        if not sentences:
            sentences = [
                "This is the first key point from the document",
                "Another important concept from the text",
                "A significant finding or conclusion",
            ]
        return "\n".join(f"• {s}" for s in sentences)

    def _sectioned(self, text: str, title: str, readability: Readability) -> str:
        sentences = split_sentences(text)

        def pick(index: int, fallback: str) -> str:
            return sentences[index] if index < len(sentences) else fallback

        intro = self._lead(
            readability,
            f"This section introduces {title} and the background you need.",
            f"This section situates {title} within its context and background literature.",
        )
        return "\n\n".join([
            f"# Introduction\n{intro} {pick(0, '')}".rstrip(),
            "# Main Arguments\n" + pick(1, "This section outlines the primary arguments made in the document."),
            "# Evidence and Support\n" + pick(2, "This section details the evidence and examples presented."),
            "# Conclusions\n" + pick(
                len(sentences) - 1 if len(sentences) > 3 else 3,
                "This section summarizes the conclusions reached in the document.",
            ),
        ])

    def _key_terms(self, text: str, title: str) -> List[KeyTerm]:
        terms = top_terms(text, 3)
        key_terms = [
            KeyTerm(term=term.capitalize(), definition=f"A recurring term in {title}.")
            for term in terms
        ]
        for i in range(len(key_terms), 3):
            key_terms.append(KeyTerm(
                term=f"Sample Term {i + 1}",
                definition=f"Definition of sample term {i + 1} from the document.",
            ))
        return key_terms


# =============================================================================
# LLM-backed generator
# =============================================================================

def _parse_json(response: str):
    """Parse a JSON reply, tolerating markdown code fences."""
    response = response.strip()
    if response.startswith("```"):
        response = response.split("```")[1]
        if response.startswith("json"):
            response = response[4:]
    try:
        return json.loads(response)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM response: {e}")
        raise LLMResponseParseError() from e


class LLMContentGenerator(ContentGenerator):
    """Generator that delegates writing to a language model."""

    def __init__(self, provider: LLMProvider, max_input_chars: int = 15000):
        self.provider = provider
        self.max_input_chars = max_input_chars

    async def _ask(self, system_message: str, user_message: str, max_tokens: int):
        response = await self.provider.chat_completion(
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            temperature=0.4,
            max_tokens=max_tokens,
        )
        return _parse_json(response)

    async def summarize(
        self,
        text: str,
        title: str,
        options: SummaryOptions
    ) -> SummaryResult:
        summary_format = SummaryFormat(options.format)
        readability = Readability(options.readability)
        shapes = {
            SummaryFormat.CONCISE: "one short paragraph",
            SummaryFormat.DETAILED: "several paragraphs covering every main point",
            SummaryFormat.BULLET: "a list of bullet points, one per line, each starting with '• '",
            SummaryFormat.SECTIONED: "four markdown sections: '# Introduction', '# Main Arguments', "
                                     "'# Evidence and Support', '# Conclusions'",
        }
        register = (
            "plain language a first-year student can follow"
            if readability == Readability.SIMPLE
            else "a formal academic register"
        )
        key_term_rule = (
            'Also return "key_terms": a list of {"term", "definition"} objects for the 3-8 most important terms.'
            if options.extract_key_terms
            else 'Return "key_terms": [].'
        )

        logger.info(f"Requesting {summary_format.value} summary for: {title}")
        data = await self._ask(
            "You are a study assistant that writes faithful summaries. Return only valid JSON.",
            f"""Summarize the document "{title}" as {shapes[summary_format]}, written in {register}.
{key_term_rule}

Return JSON: {{"content": "...", "key_terms": [...]}}

DOCUMENT:
{text[:self.max_input_chars]}""",
            max_tokens=2500,
        )

        content = data.get("content") if isinstance(data, dict) else None
        if not content:
            raise LLMResponseParseError("JSON object with 'content'")

        key_terms = []
        if options.extract_key_terms:
            try:
                key_terms = [KeyTerm(**t) for t in data.get("key_terms") or []]
            except (TypeError, ValidationError) as e:
                raise LLMResponseParseError("list of key terms") from e

        return SummaryResult(content=content, key_terms=key_terms, read_time=estimate_read_time(text))

    async def generate_quiz(
        self,
        summary_text: str,
        title: str,
        difficulty: Difficulty
    ) -> QuizDraft:
        difficulty = Difficulty(difficulty)
        wanted = question_count(difficulty)

        logger.info(f"Requesting {difficulty.value} quiz for: {title}")
        data = await self._ask(
            "You are an expert educator writing multiple-choice quizzes. Return only valid JSON.",
            f"""Write {wanted} {difficulty.value} multiple-choice questions about "{title}".
Each question has exactly four options with ids "a", "b", "c", "d" and one correct option.

Return JSON: {{"questions": [{{"question": "...", "options": [{{"id": "a", "text": "..."}}], "correct_answer": "a"}}]}}

SUMMARY:
{summary_text[:self.max_input_chars]}""",
            max_tokens=3000,
        )

        raw_questions = data.get("questions") if isinstance(data, dict) else None
        if not isinstance(raw_questions, list) or len(raw_questions) < wanted:
            raise GenerationError(f"Expected {wanted} quiz questions from the language model")

        try:
            questions = [
                QuizQuestion(
                    id=i,
                    question=q["question"],
                    options=[QuizOption(**o) for o in q["options"]],
                    correct_answer=q["correct_answer"],
                )
                for i, q in enumerate(raw_questions[:wanted])
            ]
        except (KeyError, TypeError, ValidationError) as e:
            raise LLMResponseParseError("list of quiz questions") from e

        return QuizDraft(title=f"Quiz on {title}", difficulty=difficulty, questions=questions)

    async def generate_flashcards(self, summary_text: str, title: str) -> List[FlashcardDraft]:
        logger.info(f"Requesting flashcards for: {title}")
        data = await self._ask(
            "You are an expert educator creating flashcards for spaced repetition learning. "
            "Return only valid JSON.",
            f"""Create {FLASHCARD_BATCH_SIZE} flashcards from this summary of "{title}".

Return JSON: {{"cards": [{{"front": "question", "back": "answer"}}]}}

SUMMARY:
{summary_text[:self.max_input_chars]}""",
            max_tokens=2000,
        )

        raw_cards = data.get("cards") if isinstance(data, dict) else None
        if not isinstance(raw_cards, list) or len(raw_cards) < FLASHCARD_BATCH_SIZE:
            raise GenerationError(f"Expected {FLASHCARD_BATCH_SIZE} flashcards from the language model")

        try:
            return [FlashcardDraft(front=str(c["front"]), back=str(c["back"]))
                    for c in raw_cards[:FLASHCARD_BATCH_SIZE]]
        except (KeyError, TypeError) as e:
            raise LLMResponseParseError("list of flashcards") from e


def build_content_generator(settings, provider: Optional[LLMProvider] = None) -> ContentGenerator:
    """Create the generator selected by configuration."""
    if settings.generator == "openai":
        provider = provider or OpenAIProvider(api_key=settings.openai_api_key, model=settings.openai_model)
        logger.info(f"Using OpenAI content generator ({settings.openai_model})")
        return LLMContentGenerator(provider)

    logger.info("Using placeholder content generator")
    return PlaceholderContentGenerator(delay_seconds=settings.generation_delay_seconds)
