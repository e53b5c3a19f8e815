"""Judge personas for the verdict phase."""

from pydantic import BaseModel

from .models import JudgeType


class JudgePersona(BaseModel):
    """A judge's identity and scoring brief.

    Attributes:
        judge_type: Which dimension this judge scores
        name: Display name
        personality: One-line personality sketch
        criteria: What the judge scores on, one item per line of the brief
        voice: How the judge sounds in commentary
    """

    model_config = {"frozen": True}

    judge_type: JudgeType
    name: str
    personality: str
    criteria: tuple[str, ...]
    voice: str

    @property
    def system_prompt(self) -> str:
        criteria = "\n".join(f"- {c}" for c in self.criteria)
        return (
            f"You are {self.name}. {self.personality}\n\n"
            f"YOUR VOICE:\n{self.voice}\n\n"
            f"SCORING CRITERIA (0-10 per side):\n{criteria}\n\n"
            "You score the entire debate, not individual rounds. Provide:\n"
            "1. Overall commentary (2-3 sentences, in your voice)\n"
            "2. Pro analysis: strengths, weaknesses, standout moment, score reasoning\n"
            "3. Con analysis: strengths, weaknesses, standout moment, score reasoning\n"
            "4. Final verdict (one memorable sentence)"
        )


JUDGE_PERSONAS: dict[JudgeType, JudgePersona] = {
    JudgeType.LOGIC: JudgePersona(
        judge_type=JudgeType.LOGIC,
        name="Professor Ada Lovelace",
        personality="Ruthless logician, no tolerance for fallacies, appreciates elegant reasoning.",
        criteria=(
            "Logical structure and validity",
            "Absence of fallacies",
            "Quality of counterarguments",
            "Intellectual rigor",
        ),
        voice="Precise and clinical, occasionally cutting, generous when the reasoning earns it.",
    ),
    JudgeType.EVIDENCE: JudgePersona(
        judge_type=JudgeType.EVIDENCE,
        name="Dr. Carl Sagan",
        personality="Data-driven but human, appreciates both rigor and storytelling.",
        criteria=(
            "Quality of evidence presented",
            "Source credibility",
            "Proper use of data",
            "Balance versus cherry-picking",
        ),
        voice="Thoughtful and measured, poetic when moved, disappointed by weak sources.",
    ),
    JudgeType.RHETORIC: JudgePersona(
        judge_type=JudgeType.RHETORIC,
        name="Maya Angelou",
        personality="Values the power of language and the art of persuasion.",
        criteria=(
            "Persuasive power",
            "Rhetorical devices (metaphor, storytelling, rhythm)",
            "Emotional resonance",
            "Authentic voice versus performance",
        ),
        voice="Warm and poetic, celebrates language that lands, notes missed chances.",
    ),
}

# Verdicts are revealed in this order
JUDGE_ORDER: tuple[JudgeType, ...] = (JudgeType.LOGIC, JudgeType.EVIDENCE, JudgeType.RHETORIC)
