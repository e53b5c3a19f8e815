"""
Debate Arena - two AI debaters, three AI judges, one topic.

Runs a single debate in-process against the configured LLM provider and
renders every phase in the terminal as it happens: openings,
cross-examination, rebuttals, a lightning round, closings, and the judges'
verdict, with live momentum tracking.

Supports any OpenAI-compatible provider: OpenAI, Grok, OpenRouter,
Ollama, vLLM, and LM Studio.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from core.display import console, render_message, render_summary
from modules.debates.models import Debate, DebatePhase
from modules.debates.orchestrator import OrchestratorSettings
from modules.debates.publisher import EventPublisher
from modules.debates.reconstructor import DebateReconstructor
from modules.debates.repository import DebateRepository
from modules.debates.service import DebateService
from modules.debates.writer import DebateWriter
from modules.generation.llm import LLMStructuredGenerator
from modules.realtime.broker import InMemoryBroker
from shared.config import Settings, get_settings


async def run_debate(topic: str, settings: Settings) -> Debate:
    """Run one debate and render its messages as they are published.

    Args:
        topic: The topic to debate
        settings: Settings providing the model and orchestration knobs

    Returns:
        The finished debate as stored
    """
    writer = DebateWriter(
        DebateRepository(strict=settings.strict_debate_ids),
        EventPublisher(InMemoryBroker()),
    )
    service = DebateService(
        writer=writer,
        generator=LLMStructuredGenerator.from_settings(settings),
        settings=OrchestratorSettings.from_settings(settings),
    )

    debate_id = await service.trigger_debate(topic)
    reconstructor = DebateReconstructor(debate_id, topic)
    async for message in service.subscribe(debate_id):
        render_message(message, reconstructor.apply(message))

    return await service.wait_for(debate_id)


def main(topic: str, settings: Settings) -> int:
    """Main entry point.

    Returns:
        Process exit code (1 if the debate failed)
    """
    console.print(f"[bold]Topic:[/bold] {topic}")
    console.print(f"[dim]Model: {settings.llm_model}[/dim]")
    console.print(f"[dim]Cross-examination rounds: {settings.cross_exam_rounds}[/dim]\n")

    debate = asyncio.run(run_debate(topic, settings))

    render_summary(debate)
    if debate.status is not DebatePhase.COMPLETED:
        return 1
    console.print("\n[bold green]Done![/bold green]")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Run an AI debate with live momentum tracking and judging"
    )
    parser.add_argument(
        "topic",
        nargs="?",
        help="Topic to debate",
    )
    parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Path to a .txt or .md file containing the topic",
    )
    parser.add_argument(
        "--model", "-m",
        help="Model as 'provider/model_id' (default: LLM_MODEL or openai/gpt-4o-mini)",
    )
    parser.add_argument(
        "--rounds", "-r",
        type=int,
        choices=[1, 2],
        help="Cross-examination rounds",
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Reveal judges' scores without pausing",
    )
    args = parser.parse_args()

    # Resolve topic from file or argument
    if args.file:
        if not args.file.exists():
            console.print(f"[red]Error:[/red] File not found: {args.file}")
            sys.exit(1)
        if args.file.suffix.lower() not in (".txt", ".md"):
            console.print(f"[red]Error:[/red] File must be .txt or .md: {args.file}")
            sys.exit(1)
        topic = args.file.read_text().strip()
    elif args.topic:
        topic = args.topic
    else:
        parser.error("Either a topic or --file must be provided")

    overrides = {}
    if args.model:
        overrides["llm_model"] = args.model
    if args.rounds:
        overrides["cross_exam_rounds"] = args.rounds
    if args.no_delay:
        overrides["judge_reveal_delay_seconds"] = 0.0
    settings = get_settings().model_copy(update=overrides)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    sys.exit(main(topic, settings))
