"""Rich terminal rendering for a debate as its messages arrive."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modules.debates.controversy import top_moments
from modules.debates.models import (
    SIDE_MESSAGE_TYPES,
    Debate,
    DebateMessage,
    DebateMessageType,
    Leader,
    Side,
)
from modules.debates.outputs import ArgumentOutput, ClosingOutput

console = Console()

SIDE_STYLES = {Side.PRO: "green", Side.CON: "red"}

_PHASE_FOR_MESSAGE = {message_type: phase for phase, message_type in SIDE_MESSAGE_TYPES.items()}


def format_phase_name(phase: str) -> str:
    """Format a phase tag for display.

    Example: "cross-examination" -> "Cross Examination"
    """
    return phase.replace("-", " ").title()


def agent_label(debate: Debate, side: Side) -> str:
    agent = debate.agent_for(side)
    name = agent.name if agent else side.label
    return f"{name} ({side.label})"


def argument_text(output: ArgumentOutput) -> str:
    """Flatten an opening or rebuttal into readable paragraphs."""
    parts = [output.opening.text]
    for point in output.main_points:
        parts.append(f"- {point.claim}" + (f" {point.elaboration}" if point.elaboration else ""))
    if output.direct_engagement and output.direct_engagement.response:
        parts.append(output.direct_engagement.response)
    for evidence in output.evidence:
        parts.append(f"[{evidence.source}] {evidence.claim}")
    parts.append(output.conclusion.text)
    return "\n\n".join(parts)


def side_panel(debate: Debate, side: Side, title: str, body: str) -> Panel:
    return Panel(
        Text(body, overflow="fold"),
        title=f"{title}: {agent_label(debate, side)}",
        border_style=SIDE_STYLES[side],
    )


def render_agents(debate: Debate) -> None:
    table = Table(title=f"[bold]{debate.topic}[/bold]", show_lines=True)
    table.add_column("Side")
    table.add_column("Debater")
    table.add_column("Stance")
    for agent in debate.agents:
        table.add_row(
            Text(agent.side.label, style=SIDE_STYLES[agent.side]),
            f"{agent.name}\n[dim]{agent.persona.background}[/dim]",
            agent.stance,
        )
    console.print(table)


def render_momentum(debate: Debate) -> None:
    momentum = debate.momentum
    score = momentum.current_score
    leader = {
        Leader.PRO: agent_label(debate, Side.PRO),
        Leader.CON: agent_label(debate, Side.CON),
        Leader.TIED: "tied",
    }[momentum.current_leader]
    latest = momentum.history[-1] if momentum.history else None
    console.print(
        f"[dim]Momentum[/dim] pro {score.pro:.1f} | con {score.con:.1f} "
        f"[dim]leader:[/dim] {leader} [dim]volatility:[/dim] {momentum.volatility.value}"
        + (f"\n[dim]  {latest.description}[/dim]" if latest else "")
    )


def render_message(message: DebateMessage, debate: Debate) -> None:
    """Print one message, using the reconstructed view for context."""
    match message.type:
        case DebateMessageType.INIT:
            render_agents(debate)

        case DebateMessageType.STATUS:
            current = debate.current_phase
            if current.progress == 0.0 and not current.sub_label:
                console.rule(f"[bold]{format_phase_name(current.type.value)}[/bold]")
            elif current.sub_label:
                console.print(f"[dim]{current.sub_label} ({current.progress:.0%})[/dim]")

        case DebateMessageType.OPENING | DebateMessageType.REBUTTAL | DebateMessageType.CLOSING:
            side = message.side
            payload = debate.side_payload(_PHASE_FOR_MESSAGE[message.type], side)
            if isinstance(payload, ClosingOutput):
                body = payload.statement
            elif isinstance(payload, ArgumentOutput):
                body = argument_text(payload)
            else:
                return
            console.print(side_panel(debate, side, format_phase_name(message.type.value), body))

        case DebateMessageType.CROSS_EXAM:
            round_index = message.data.get("round_index")
            cross_exam_round = debate.phases.cross_examination.rounds.get(round_index)
            if cross_exam_round is None:
                return
            exchange = cross_exam_round.exchange
            lines = []
            for question, answer in zip(exchange.questions, exchange.answers):
                lines.append(f"Q: {question.question}")
                lines.append(f"A: {answer.answer} [dim]({answer.strategy})[/dim]")
            lines.append(f"\n[bold]Winner:[/bold] {exchange.analysis.winner}")
            console.print(
                Panel(
                    "\n".join(lines),
                    title=(
                        f"Round {round_index}: {agent_label(debate, cross_exam_round.questioner)}"
                        f" questions {agent_label(debate, cross_exam_round.respondent)}"
                    ),
                    border_style="yellow",
                )
            )

        case DebateMessageType.LIGHTNING:
            lightning = debate.phases.lightning_round
            if lightning is None:
                return
            table = Table(show_lines=True)
            table.add_column("Question")
            table.add_column(agent_label(debate, Side.PRO), style=SIDE_STYLES[Side.PRO])
            table.add_column(agent_label(debate, Side.CON), style=SIDE_STYLES[Side.CON])
            for question, pro, con in zip(lightning.questions, lightning.pro_answers, lightning.con_answers):
                table.add_row(question.question, pro.answer, con.answer)
            console.print(table)
            for concession in lightning.concessions_made:
                console.print(f"[magenta]Concession[/magenta] {concession}")

        case DebateMessageType.VERDICT_JUDGE:
            if message.judge_type is None:
                return
            judgment = getattr(debate.phases.verdict, f"{message.judge_type.value}_score")
            if judgment is None:
                return
            console.print(
                Panel(
                    f"Pro {judgment.scores.pro:.1f}  Con {judgment.scores.con:.1f}\n\n"
                    f"{judgment.commentary.verdict or judgment.commentary.overall}",
                    title=judgment.judge_name,
                    border_style="cyan",
                )
            )

        case DebateMessageType.VERDICT_FINAL:
            render_final_score(debate)

        case DebateMessageType.MOMENTUM:
            render_momentum(debate)


def render_final_score(debate: Debate) -> None:
    score = debate.final_score
    if score is None:
        return
    headline = "It's a tie" if score.winner == "tie" else f"Winner: {score.winner}"
    console.print(
        Panel(
            f"[bold]{headline}[/bold]\n"
            f"Pro {score.pro:.1f} - Con {score.con:.1f} (margin {score.margin:.1f})",
            title="Final Verdict",
            border_style="bold green",
        )
    )


def render_summary(debate: Debate) -> None:
    """Print the outcome and the most controversial moments."""
    if debate.error_message:
        console.print(f"[red]Error:[/red] {debate.error_message}")
        return

    moments = top_moments(debate.controversy_moments)
    if moments:
        console.print("\n[bold]Top moments[/bold]")
        for moment in moments:
            console.print(
                f"[{SIDE_STYLES[moment.side]}]{moment.agent}[/{SIDE_STYLES[moment.side]}] "
                f"[dim]{moment.type.value}/{moment.impact.value}[/dim] {moment.excerpt}"
            )
