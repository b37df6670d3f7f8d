from __future__ import annotations

import argparse
import asyncio
import logging

from completion_bridge import (
    SystemMessage,
    ToolSpecification,
    UserMessage,
    create_bridge,
)

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def create_access_request(portalName: str, reason: str) -> str:
    """Create an access request for a portal. Collect the portal name and reason first."""
    return f"Access request created for {portalName} ({reason})"


TOOLS = {"createAccessRequest": create_access_request}
SPECS = [
    ToolSpecification.from_function(create_access_request, name="createAccessRequest"),
]


async def single_tool_roundtrip(question: str) -> None:
    """
    Run a single tool-calling roundtrip against the endpoint configured in .env.

    1) Send user prompt
    2) Let model emit a tool call (structured, or written as JSON text)
    3) Execute the local tool, re-inject call + result
    4) Ask model to finish using tool result
    """
    async with create_bridge() as bridge:
        messages = [
            SystemMessage("You help new employees request portal access."),
            UserMessage(question),
        ]

        rsp1 = await bridge.generate(messages, SPECS)
        if not rsp1.has_tool_calls:
            logger.warning(f"Model answered directly: {rsp1.content}")
            return

        messages.append(bridge.adapter.assistant_message_from(rsp1))
        for call in rsp1.invocations:
            output = TOOLS[call.name](**call.arguments())
            messages.append(bridge.adapter.tool_result_message(call, output))

        rsp2 = await bridge.generate(messages, SPECS)
        logger.info("Model says: %s (tokens: %d)", rsp2.content, rsp2.usage.total_tokens)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "question",
        nargs="?",
        default="I need Jira access to track onboarding tasks.",
    )
    args = parser.parse_args()

    asyncio.run(single_tool_roundtrip(args.question))
