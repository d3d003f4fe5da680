"""Prompt builders for model-assisted answer and session evaluation."""
from __future__ import annotations

from textwrap import dedent
from typing import Dict

from agents.types import InterviewContext, Question

LANGUAGE_NAMES = {"en": "English", "ur": "Urdu"}

VISA_CRITERIA: Dict[str, str] = {  # Officer focus areas per visa type
    "tourist": dedent(
        """
        - Does the applicant have a clear travel itinerary?
        - Is the stay duration reasonable (typically 1-4 weeks)?
        - Do they have sufficient funds and a return ticket?
        - Are there strong ties to Pakistan (job, family, property)?
        """
    ).strip(),
    "student": dedent(
        """
        - Is the university and course genuine and specific?
        - Is there a clear study plan and career goal?
        - Can they afford tuition and living costs?
        - Do they intend to return to Pakistan after studies?
        """
    ).strip(),
    "work": dedent(
        """
        - Is the employer and job title specific and verifiable?
        - Is the contract length and salary stated clearly?
        - Do their qualifications match the job?
        - Is accommodation arranged?
        """
    ).strip(),
    "visit": dedent(
        """
        - Who are they visiting and what is the relationship?
        - Is the sponsor's status and address known?
        - Is the visit duration reasonable?
        - Are there strong ties to Pakistan?
        """
    ).strip(),
    "family": dedent(
        """
        - Is the family relationship clearly stated and genuine?
        - Does the applicant know the sponsor's occupation and address?
        - Is the intended stay consistent with the visa category?
        - Are the answers consistent with the sponsor's documents?
        """
    ).strip(),
    "business": dedent(
        """
        - Is the business purpose specific (meeting, conference, trade)?
        - Is the inviting company named?
        - Is the applicant's role in their own company clear?
        - Who pays for the trip, and is the duration short?
        """
    ).strip(),
}


def _history(context: InterviewContext) -> str:
    if not context.previous:
        return "This is the first question."
    return " | ".join(f"Q: {item.question} A: {item.answer}" for item in context.previous)


ANSWER_TEMPLATE = dedent(  # Per-answer evaluation prompt
    """
    You are a senior immigration officer at Pakistan's Federal Investigation Agency (FIA)
    conducting a pre-departure interview.

    CONTEXT:
    - Visa type: {visa_type}
    - Destination: {destination}
    - Interview language: {language}
    - Previous exchanges: {history}

    QUESTION: {question}
    APPLICANT'S ANSWER: {answer}

    VISA-SPECIFIC CRITERIA:
    {criteria}

    EVALUATE:
    1. RELEVANCE: Does the answer address the question asked?
    2. COMPLETENESS: Are names, dates, places and amounts specific?
    3. CLARITY: Is the answer direct and easy to follow?
    4. CONFIDENCE: Does the applicant avoid hesitation and filler words?
    5. CONSISTENCY: Does it agree with the previous answers?
    6. FACTUAL CHECK: Are the stated facts plausible?
    7. RED FLAGS: Anything that suggests overstay, fraud or an agent-coached answer?

    Reply with a single JSON object and nothing else:
    {{
      "score": 0-100,
      "completeness": 0-100,
      "clarity": 0-100,
      "relevance": 0-100,
      "confidence": 0-100,
      "consistency": 0-100,
      "isValid": true,
      "feedback": "short feedback in {language}",
      "feedbackUrdu": "the same feedback in Urdu",
      "flags": [],
      "suggestions": [],
      "factCheck": {{"verified": true, "issues": []}},
      "spellingErrors": [],
      "consistencyIssues": []
    }}
    """
).strip()

ASSESSMENT_TEMPLATE = dedent(  # Holistic end-of-session prompt
    """
    You are a senior immigration officer at Pakistan's FIA reviewing a complete
    mock interview for a {visa_type} visa to {destination}.

    TRANSCRIPT:
    {transcript}

    VISA-SPECIFIC CRITERIA:
    {criteria}

    Consider holistically:
    1. Overall credibility of the applicant's story
    2. Consistency across all answers
    3. Specificity of names, dates, places and amounts
    4. Confidence and directness
    5. Ties to Pakistan and intention to return
    6. Financial capacity for the trip
    7. Any red flags an officer would act on

    Scoring bands: 80-100 well prepared, 60-79 adequate with gaps,
    40-59 significant concerns, 0-39 likely to be offloaded.

    Reply with a single JSON object and nothing else:
    {{
      "overallScore": 0-100,
      "passed": true,
      "feedback": "summary feedback",
      "feedbackUrdu": "the same summary in Urdu",
      "improvements": [],
      "strengths": [],
      "concerns": []
    }}
    """
).strip()


def build_answer_prompt(question: Question, answer: str, context: InterviewContext) -> str:  # Compose per-answer evaluation prompt
    return ANSWER_TEMPLATE.format(
        visa_type=context.visa_type,
        destination=context.destination_country,
        language=LANGUAGE_NAMES.get(context.language, "English"),
        history=_history(context),
        question=question.text,
        answer=answer,
        criteria=VISA_CRITERIA.get(context.visa_type, VISA_CRITERIA["tourist"]),
    )


def build_assessment_prompt(context: InterviewContext) -> str:  # Compose holistic session prompt
    transcript = "\n".join(
        f"Q{index}: {item.question}\nA{index}: {item.answer}"
        for index, item in enumerate(context.previous, start=1)
    ) or "(no answers)"
    return ASSESSMENT_TEMPLATE.format(
        visa_type=context.visa_type,
        destination=context.destination_country,
        transcript=transcript,
        criteria=VISA_CRITERIA.get(context.visa_type, VISA_CRITERIA["tourist"]),
    )


__all__ = ["ASSESSMENT_TEMPLATE", "ANSWER_TEMPLATE", "VISA_CRITERIA", "build_answer_prompt", "build_assessment_prompt"]
