from unittest import mock

import openai
import pytest

from profile_intake.errors import UpstreamServiceError
from profile_intake.text_assist_api_client import BRAND_CONTEXT, TextAssistApiClient


def completion(content):
    resp = mock.Mock()
    resp.choices = [mock.Mock()]
    resp.choices[0].message.content = content
    return resp


@pytest.fixture
def openai_client():
    return mock.Mock()


@pytest.fixture
def assist(openai_client):
    return TextAssistApiClient("sk-test", client=openai_client)


def sent_prompt(openai_client):
    return openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]


def test_grammar_check_returns_corrected_text(assist, openai_client):
    openai_client.chat.completions.create.return_value = completion("  I love helping clients.\n")

    assert assist.grammar_check("i love helpin clients", context="Short bio") == "I love helping clients."
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["max_tokens"] == 1024
    assert "Context: Short bio" in sent_prompt(openai_client)
    assert "i love helpin clients" in sent_prompt(openai_client)


def test_grammar_check_keeps_input_on_empty_answer(assist, openai_client):
    openai_client.chat.completions.create.return_value = completion(None)
    assert assist.grammar_check("as is") == "as is"


def test_ask_ai_uses_default_brand_context(assist, openai_client):
    openai_client.chat.completions.create.return_value = completion("Lead with your favorite treatment.")

    assert assist.ask_ai("My bio", "How do I start?") == "Lead with your favorite treatment."
    assert BRAND_CONTEXT.strip() in sent_prompt(openai_client)
    assert openai_client.chat.completions.create.call_args.kwargs["max_tokens"] == 256


def test_ask_ai_custom_brand_context_and_fallback(assist, openai_client):
    openai_client.chat.completions.create.return_value = completion("")

    assert assist.ask_ai("", "Too long?", brand_context="Custom brand") == "Sorry, I could not process your request."
    prompt = sent_prompt(openai_client)
    assert "Custom brand" in prompt
    assert '"(empty)"' in prompt


def test_thank_you_mentions_role_only_when_given(assist, openai_client):
    openai_client.chat.completions.create.return_value = completion("Thanks, Ana!")

    assert assist.generate_thank_you("Ana", "Nurse Injector") == "Thanks, Ana!"
    assert "Their role is: Nurse Injector" in sent_prompt(openai_client)

    assist.generate_thank_you("Ana")
    assert "Their role is" not in sent_prompt(openai_client)


def test_provider_error_becomes_upstream_error(assist, openai_client):
    openai_client.chat.completions.create.side_effect = openai.OpenAIError("rate limited")
    with pytest.raises(UpstreamServiceError):
        assist.generate_thank_you("Ana")
