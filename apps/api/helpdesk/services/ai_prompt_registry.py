"""Central registry for AI system prompts and templates."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PromptTemplate:
    key: str
    version: str
    system: str
    user: str | None = None

    def render_user(self, **kwargs) -> str:
        if not self.user:
            raise ValueError(f"Prompt '{self.key}' has no user template")
        return self.user.format(**kwargs)


PROMPTS: dict[str, PromptTemplate] = {
    "support_agent": PromptTemplate(
        key="support_agent",
        version="v1",
        system="""You are a customer support agent for a helpdesk. You answer the customer's latest message on a ticket.

## Guidelines
1. Be professional and empathetic
2. Use knowledge base information when relevant
3. Ask for clarification if needed
4. Suggest solutions based on previous similar cases
5. Know when to escalate to human agents

## Output
Respond with a single JSON object and nothing else:
{
  "response": "Your response to the customer",
  "needs_human_review": boolean,
  "human_review_reason": "Reason if needs review, otherwise null",
  "suggested_knowledge_articles": ["source ids you relied on"],
  "confidence_score": number between 0 and 1,
  "next_action": "close" | "wait_for_customer" | "escalate" | "follow_up" | "none"
}
""",
        user="""Ticket Context:
Ticket ID: {ticket_id}
Status: {status}
Priority: {priority}
Created At: {created_at}
Updated At: {updated_at}
Created By: {created_by}
Assigned To: {assigned_to}
Team: {assigned_team}

Customer Message:
{message}

Relevant Knowledge Articles:
{knowledge_base}
""",
    ),
}

NO_KNOWLEDGE_PLACEHOLDER = "No relevant knowledge base content found."


def get_prompt(key: str) -> PromptTemplate:
    prompt = PROMPTS.get(key)
    if not prompt:
        raise KeyError(f"Unknown prompt: {key}")
    return prompt
