import pytest


def test_prompt_registry_renders_support_agent():
    from helpdesk.services.ai_prompt_registry import get_prompt

    prompt = get_prompt("support_agent")
    rendered = prompt.render_user(
        ticket_id="ticket-1",
        status="open",
        priority="normal",
        created_at="2026-01-01T00:00:00",
        updated_at="N/A",
        created_by="Casey Customer",
        assigned_to="Alex Agent",
        assigned_team="Tier 1",
        message="How do I reset my password?",
        knowledge_base="FAQ: reset from the login page",
    )

    assert "ticket-1" in rendered
    assert "Casey Customer" in rendered
    assert "Tier 1" in rendered
    assert "How do I reset my password?" in rendered
    assert "FAQ: reset from the login page" in rendered
    assert '"next_action"' in prompt.system
    assert prompt.version


def test_prompt_registry_invalid_key_raises():
    from helpdesk.services.ai_prompt_registry import get_prompt

    with pytest.raises(KeyError):
        get_prompt("unknown_key")
