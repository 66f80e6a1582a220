"""Agent module: agent interfaces, errors and the reflection loop."""

# ConversationAgent is not imported here to avoid circular imports
# Import directly: from reflectlib.agent.core.conversation_agent import ConversationAgent
