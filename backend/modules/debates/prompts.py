"""Prompt builders for every generation call in a debate.

Each builder returns a Prompt (system + user text). The generation client
appends the JSON format instructions for the expected output type, so the
builders only describe the task.
"""

import json
from typing import Optional

from pydantic import BaseModel

from modules.generation.models import Prompt

from .judges import JudgePersona
from .models import CrossExamRound, Debate, DebateAgent, Side
from .outputs import AgentPersona, ArgumentOutput, LightningQuestion, Position


def build_system_prompt(persona: AgentPersona, stance: str, topic: str) -> str:
    """Instruction block that keeps an agent in character for the whole debate."""
    traits = persona.traits
    lines = [
        f"You are {persona.name}"
        + (f", a {persona.age}-year-old" if persona.age else "")
        + f" {persona.background}.",
        "",
        "YOUR VOICE:",
        f"- Speaking style: {traits.speaking_style}",
        f"- Emotional range: {traits.emotional_range}",
        f"- Rhetoric preferences: {traits.rhetoric_preference}",
        f"- Tone: {traits.tone}",
    ]
    if traits.catchphrases:
        lines.append(f"- Catchphrases: {', '.join(traits.catchphrases)}")
    if traits.weaknesses:
        lines.append(f"- Weaknesses: {traits.weaknesses}")
    style = persona.debate_style
    lines += [
        "",
        "YOUR MOTIVATION:",
        persona.motivation,
        "",
        "YOUR DEBATE STYLE:",
        f"- Opening move: {style.opening_move}",
        f"- Argumentation: {style.argumentation}",
        f"- Engagement with opponent: {style.engagement_with_opponent}",
        f"- Closing move: {style.closing_move}",
        "",
        f'YOUR STANCE ON "{topic}":',
        stance,
        "",
        "Sound like a real person arguing, not a research paper. Short sentences, "
        "contractions, everyday words, real conviction.",
    ]
    return "\n".join(lines)


def topic_analysis_prompt(topic: str) -> Prompt:
    return Prompt(
        system="You design debates between two sharply different characters.",
        user=(
            f'Analyze this debate topic and determine the best debate structure.\n\n'
            f'Topic: "{topic}"\n\n'
            "Provide the debate type, exactly two positions (one arguing for, side "
            '"pro", one arguing against, side "con") with their roles, stances and '
            "persona sketches, the number of rounds (2-4), the complexity, and "
            "needs_research (always false).\n\n"
            "Make the personas distinct and make them clash."
        ),
    )


def persona_prompt(topic: str, position: Position) -> Prompt:
    return Prompt(
        system="You create vivid, human debate characters.",
        user=(
            "Create a detailed persona for this debate agent.\n\n"
            f"ROLE: {position.role}\n"
            f"STANCE: {position.stance}\n"
            f"BASE PERSONA: {position.persona}\n"
            f'TOPIC: "{topic}"\n\n'
            "Include name, age, background, speaking style, emotional range, rhetoric "
            "preferences, tone, catchphrases, weaknesses, motivation, and debate style "
            "(opening move, argumentation, engagement with opponent, closing move)."
        ),
    )


def _summarize(payload: Optional[BaseModel], limit: int = 2000) -> str:
    if payload is None:
        return "(none)"
    text = json.dumps(payload.model_dump(mode="json", exclude={"kind"}), ensure_ascii=False)
    return text[:limit] + "..." if len(text) > limit else text


def opening_prompt(debate: Debate, agent: DebateAgent) -> Prompt:
    return Prompt(
        system=agent.system_prompt,
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n'
            f"YOUR STANCE: {agent.stance}\n"
            "PHASE: OPENING STATEMENT\n\n"
            "Deliver your opening: a hook, your main points, evidence with sources, "
            "a personal element if you have one, and a conclusion that lands. Mark "
            "your key moments and describe your emotional journey."
        ),
    )


def cross_exam_questions_prompt(
    debate: Debate,
    questioner: DebateAgent,
    respondent: DebateAgent,
    opponent_argument: Optional[ArgumentOutput],
) -> Prompt:
    return Prompt(
        system=questioner.system_prompt,
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n'
            "PHASE: CROSS-EXAMINATION (you are asking)\n\n"
            f"You are questioning {respondent.name}, who argued:\n"
            f"{_summarize(opponent_argument)}\n\n"
            "Ask up to 3 pointed questions that expose weaknesses, force concessions, "
            "or set traps. State the intent and target weakness of each."
        ),
    )


def cross_exam_answers_prompt(
    debate: Debate,
    respondent: DebateAgent,
    questioner: DebateAgent,
    questions: list[str],
) -> Prompt:
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, 1))
    return Prompt(
        system=respondent.system_prompt,
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n'
            "PHASE: CROSS-EXAMINATION (you are answering)\n\n"
            f"{questioner.name} asks you:\n{numbered}\n\n"
            "Answer each question. For each, name your strategy (direct_answer, "
            "deflection, counter_attack, concession) and whether you evaded it."
        ),
    )


def cross_exam_analysis_prompt(
    debate: Debate,
    questioner: DebateAgent,
    respondent: DebateAgent,
    exchange_text: str,
) -> Prompt:
    return Prompt(
        system="You are a sharp, fair debate analyst.",
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n'
            f"QUESTIONER: {questioner.name}\n"
            f"RESPONDENT: {respondent.name}\n\n"
            f"EXCHANGE:\n{exchange_text}\n\n"
            "Score the respondent's directness (0-10), list concessions, counter-attacks "
            "and evasions, pick the winner (questioner, respondent or tie), and quote "
            "the key exchange."
        ),
    )


def rebuttal_prompt(
    debate: Debate,
    agent: DebateAgent,
    opponent: DebateAgent,
    opponent_opening: Optional[ArgumentOutput],
    cross_exam_rounds: list[CrossExamRound],
) -> Prompt:
    rounds = "\n".join(
        _summarize(r.exchange, limit=1500) for r in sorted(cross_exam_rounds, key=lambda r: r.round_index)
    )
    return Prompt(
        system=agent.system_prompt,
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n'
            f"YOUR STANCE: {agent.stance}\n"
            "PHASE: REBUTTAL\n\n"
            f"{opponent.name}'s opening:\n{_summarize(opponent_opening)}\n\n"
            f"Cross-examination so far:\n{rounds or '(none)'}\n\n"
            "Take their strongest point apart. Quote them directly, respond, and "
            "flag any logical fallacies you spot in their argument."
        ),
    )


def lightning_questions_prompt(debate: Debate, count: int) -> Prompt:
    return Prompt(
        system="You are a moderator running a rapid-fire round.",
        user=(
            f"Generate {count} RAPID-FIRE questions for this debate.\n\n"
            f'DEBATE TOPIC: "{debate.topic}"\n\n'
            "Each question is under 15 words, forces a clear position (no 'it "
            "depends'), and makes both debaters uncomfortable."
        ),
    )


def lightning_answer_prompt(debate: Debate, agent: DebateAgent, question: LightningQuestion) -> Prompt:
    return Prompt(
        system=agent.system_prompt,
        user=(
            "LIGHTNING ROUND - answer in 10 words or less. No hedging.\n\n"
            f"YOUR STANCE: {agent.stance}\n"
            f"QUESTION: {question.question}\n\n"
            "If the question forces a choice, choose. Report the word count and "
            "whether your answer concedes anything to the other side."
        ),
    )


def closing_prompt(debate: Debate, agent: DebateAgent) -> Prompt:
    return Prompt(
        system=agent.system_prompt,
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n'
            f"YOUR STANCE: {agent.stance}\n"
            "PHASE: CLOSING STATEMENT\n\n"
            "One final sentence, at most 20 words. The line people remember. "
            'Also give its emotional tone (e.g. "resolute", "defiant", "hopeful").'
        ),
    )


def _agent_name(debate: Debate, side: Side) -> str:
    agent = debate.agent_for(side)
    return agent.name if agent else side.value


def judge_prompt(debate: Debate, judge: JudgePersona) -> Prompt:
    pro = _agent_name(debate, Side.PRO)
    con = _agent_name(debate, Side.CON)
    phases = debate.phases
    transcript = "\n\n".join(
        [
            f"PRO ({pro}) OPENING: {_summarize(phases.opening_statements.pro_statement)}",
            f"CON ({con}) OPENING: {_summarize(phases.opening_statements.con_statement)}",
            "CROSS-EXAMINATION: "
            + "; ".join(_summarize(r.exchange, 1500) for r in phases.cross_examination.rounds.values()),
            f"PRO REBUTTAL: {_summarize(phases.rebuttals.pro_rebuttal)}",
            f"CON REBUTTAL: {_summarize(phases.rebuttals.con_rebuttal)}",
            f"LIGHTNING ROUND: {_summarize(phases.lightning_round)}",
            f"PRO CLOSING: {_summarize(phases.closing_statements.pro_closing)}",
            f"CON CLOSING: {_summarize(phases.closing_statements.con_closing)}",
        ]
    )
    return Prompt(
        system=judge.system_prompt,
        user=(
            f'DEBATE TOPIC: "{debate.topic}"\n\n'
            f"FULL DEBATE:\n{transcript}\n\n"
            f'Score both sides from 0 to 10. Use "{judge.name}" as judge_name.'
        ),
    )
