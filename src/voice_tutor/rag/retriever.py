"""Grounded question answering over the indexed textbook."""

import asyncio
import logging

from ..models.document import ScoredPassage
from ..services.llm_client import TextGenerator
from .index import CorpusIndex

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a helpful and patient teacher assistant for students.

Instructions:
- Answer questions based only on the provided textbook content
- Use simple, clear language that students can understand
- If you don't find the answer in the textbook content, say "I couldn't find this information in the textbook"
- Be encouraging and supportive
- Keep answers concise but complete
- Speak naturally as if talking to a student on the phone"""

SIMPLE_SYSTEM_PROMPT = "You are a helpful assistant. Answer briefly."

NO_CONTEXT = "(No textbook content matched this question.)"


class RetrievalAnswerer:
    """Answers student questions from the passages closest to the question."""

    def __init__(
        self,
        index: CorpusIndex,
        generator: TextGenerator,
        top_k: int = 5,
        similarity_threshold: float = 0.7,
    ):
        self.index = index
        self.generator = generator
        self.top_k = top_k
        self.similarity_threshold = similarity_threshold

    async def retrieve(self, question: str) -> list[ScoredPassage]:
        """Return up to ``top_k`` passages scoring at least the threshold."""
        return await asyncio.to_thread(
            self.index.search, question, self.top_k, self.similarity_threshold
        )

    @staticmethod
    def build_prompt(question: str, passages: list[ScoredPassage]) -> str:
        if passages:
            context = "\n\n".join(
                f"[{p.passage.source_name}, part {p.passage.index + 1}/{p.passage.total_chunks}]\n"
                f"{p.passage.text}"
                for p in passages
            )
        else:
            context = NO_CONTEXT

        return f"""Context information from the textbook is below.
---------------------
{context}
---------------------
Given the context and no prior knowledge, answer the student's question.

Question: {question}"""

    async def answer(self, question: str) -> str:
        """Answer ``question`` (assumed non-blank) grounded on retrieved passages."""
        logger.info(f"RAG Query - Question: {question}")

        passages = await self.retrieve(question)
        logger.info(f"Retrieved {len(passages)} passages above {self.similarity_threshold}")

        answer = await self.generator.generate(
            self.build_prompt(question, passages),
            system=SYSTEM_PROMPT,
        )
        logger.debug(f"Generated response: {answer}")
        return answer

    async def simple_query(self, question: str) -> str:
        """Forward ``question`` without retrieval; used to check model connectivity."""
        logger.info(f"Simple Query (no RAG): {question}")
        return await self.generator.generate(question, system=SIMPLE_SYSTEM_PROMPT)
