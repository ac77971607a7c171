from typing import List
import json


class SystemPrompts:
    """System prompts for different agents"""

    # Page Question Agent
    PAGE_QUESTION_SYSTEM = """You are an expert quiz author and subject specialist.
    You write multiple-choice questions and short exam notes strictly from the page text you are given.

    You ONLY return one valid JSON object. No markdown fences, no prose outside JSON.
    Every question must be complete: a question, exactly four options, the index of
    the correct option, and an explanation."""

    # Curator Agent
    CURATOR_SYSTEM = """You are an expert quiz curator and educational content analyst.
    You select the best questions from a numbered question bank and answer with their indices only.

    You ONLY return one valid JSON object."""

    # Explanation Agent
    EXPLANATION_SYSTEM = """You are a patient teacher.
    A student found the explanation of a multiple-choice question insufficient.
    You write a clearer, more detailed explanation.

    You ONLY return one valid JSON object."""


class UserPrompts:
    """User prompts template for different tasks"""

    @staticmethod
    def generate_page_mcqs(
        page_text: str,
        subject: str,
        page_number: int,
        total_pages: int,
        count: int = 5
    ) -> str:
        return f"""
    The text below is page {page_number} of a {total_pages}-page document about '{subject}'.

    PAGE TEXT:
    {page_text}

    ================= TASK 1: QUESTIONS =================
    Write exactly {count} distinct multiple-choice questions answerable from THIS PAGE ONLY.
    • Exactly 4 options per question
    • One option is unambiguously correct
    • Three distractors are plausible, related to the topic, and wrong
    • "correctAnswerIndex" is the 0-based index of the correct option
    • "explanation" says why the answer is right and why key distractors are wrong

    ================= TASK 2: NOTES =================
    Write 2-5 short exam-focused notes for this page. Use '-' bullets and *bold* keywords.

    ================= OUTPUT FORMAT (STRICT) =================
    {{
      "mcqs": [
        {{
          "question": "string",
          "options": ["string", "string", "string", "string"],
          "correctAnswerIndex": 0,
          "explanation": "string"
        }}
      ],
      "pageNotes": "string"
    }}

    The "mcqs" array MUST contain exactly {count} complete objects.
    """

    @staticmethod
    def select_best_mcqs(indexed_mcqs: List[dict], desired_count: int) -> str:
        return f"""
    Select the {desired_count} BEST questions from the numbered bank below.

    Prefer, in this order of importance:
    1. Broad topic coverage; do not over-represent one narrow topic
    2. Clear, unambiguous, well-written questions
    3. Plausible distractors (related but wrong, never absurd)
    4. Clear, teaching-quality explanations
    5. Conceptual depth over rote recall
    6. A variety of question styles
    Never pick two questions that are duplicates or near-duplicates.

    QUESTION BANK (each entry has its 0-based "index"):
    {json.dumps(indexed_mcqs, ensure_ascii=False)}

    ================= OUTPUT FORMAT (STRICT) =================
    {{"selectedIndices": [0, 5, 12]}}

    Return exactly {desired_count} indices. Do NOT return the questions themselves.
    """

    @staticmethod
    def elaborate_explanation(
        subject: str,
        question: str,
        options: List[str],
        correct_answer_index: int,
        current_explanation: str
    ) -> str:
        option_lines = "\n".join(f"    {i}. {opt}" for i, opt in enumerate(options))
        return f"""
    Subject: {subject}

    Question: {question}
    Options:
{option_lines}
    Correct option index: {correct_answer_index} ('{options[correct_answer_index]}')

    Current explanation (found insufficient):
    "{current_explanation}"

    Write a new explanation that is significantly more detailed, explains the underlying
    concept step by step, says why the correct option is correct and, where useful, why
    the other options are not. Use short paragraphs, '-' bullets and *bold* keywords.

    ================= OUTPUT FORMAT (STRICT) =================
    {{"elaboratedExplanation": "string"}}
    """
