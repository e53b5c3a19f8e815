"""
Debates module interface.

The API layer and the terminal runner depend on IDebateService for all
debate operations.
"""

from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from .models import Debate, DebateListResponse, DebateMessage, SubscriptionTokenResponse


@runtime_checkable
class IDebateService(Protocol):
    """
    Interface for debate operations.

    This protocol defines the contract that the debates module exposes
    to the API layer.
    """

    async def trigger_debate(self, topic: str, request_id: Optional[str] = None) -> str:
        """
        Create a debate and start running it in the background.

        The debate ID is ``debate-{request_id}``. Triggering the same
        request ID again returns the same ID without starting a second run.

        Args:
            topic: The topic to debate
            request_id: Caller-supplied request ID (a UUID is generated if omitted)

        Returns:
            The debate ID
        """
        ...

    async def run_debate(self, topic: str, request_id: Optional[str] = None) -> Debate:
        """
        Create a debate and run it to a terminal state in the caller's task.

        Returns:
            The finished debate (``completed`` or ``error``)
        """
        ...

    async def get_debate(self, debate_id: str) -> Optional[Debate]:
        """
        Get the current snapshot of a debate.

        Returns:
            Debate if found, None otherwise
        """
        ...

    async def list_debates(self) -> DebateListResponse:
        """List debate summaries, most recent first."""
        ...

    def issue_token(self, debate_id: str) -> SubscriptionTokenResponse:
        """
        Issue a subscription token for a debate's observer channel.

        Raises:
            UnknownDebateError: If the debate doesn't exist
        """
        ...

    def subscribe(self, debate_id: str) -> AsyncIterator[DebateMessage]:
        """
        Stream a debate's messages, replaying history first.

        The iterator ends when the debate reaches a terminal state.
        """
        ...
