# text_assist_api_client.py
import logging

from openai import OpenAI, OpenAIError

from profile_intake.config import AI_MODEL, ASK_AI_MAX_TOKENS, GRAMMAR_MAX_TOKENS, THANK_YOU_MAX_TOKENS
from profile_intake.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

BRAND_CONTEXT = """
The Fix Aesthetics + Wellness is a medical aesthetics and wellness center with two locations in
El Paso, Texas. It offers professional aesthetic treatments, wellness services and personalized
care in an approachable, welcoming environment.

Tone of voice: conversational and friendly, not clinical. Knowledgeable but accessible, no
unnecessary jargon. Warm and encouraging, never judgmental. Honest and transparent. Elevated but
not exclusive, professional but not pretentious.
"""

ASK_AI_FALLBACK = "Sorry, I could not process your request."


def build_grammar_prompt(text: str, context: str = None) -> str:
    context_line = f"Context: {context}\n\n" if context else ""
    return f"""You are a helpful editor. Fix any spelling and grammar errors in the following text while preserving the author's voice and meaning. Only return the corrected text with no explanation or commentary.

{context_line}Text to correct:
{text}"""


def build_ask_ai_prompt(text: str, question: str, brand_context: str = None) -> str:
    return f"""You help team members write their profile bios. Be EXTREMELY CONCISE - max 2-3 sentences.

About the business:
{(brand_context or BRAND_CONTEXT).strip()}

Their text: "{text or '(empty)'}"
Question: {question}

Give a brief, actionable answer. No fluff, no lengthy explanations. Just the helpful point."""


def build_thank_you_prompt(name: str, role: str = None) -> str:
    role_line = f"Their role is: {role}\n" if role else ""
    return f"""Generate a warm, personalized thank you message for a team member who just submitted their profile information for The Fix Aesthetics + Wellness website.

Their name is: {name}
{role_line}
The message should:
- Be warm and appreciative
- Feel personal (use their name)
- Be 2-3 sentences max
- Match The Fix's friendly, encouraging brand voice
- NOT include any subject line or greeting - just the message itself

Return only the thank you message, nothing else."""


class TextAssistApiClient:
    def __init__(self, api_key, model=AI_MODEL, client=None):
        self.model = model
        self.openai_client = client or OpenAI(api_key=api_key)

    def grammar_check(self, text: str, context: str = None) -> str:
        corrected = self._complete(build_grammar_prompt(text, context), GRAMMAR_MAX_TOKENS)
        return corrected or text

    def ask_ai(self, text: str, question: str, brand_context: str = None) -> str:
        answer = self._complete(build_ask_ai_prompt(text, question, brand_context), ASK_AI_MAX_TOKENS)
        return answer or ASK_AI_FALLBACK

    def generate_thank_you(self, name: str, role: str = None) -> str:
        message = self._complete(build_thank_you_prompt(name, role), THANK_YOU_MAX_TOKENS)
        return message or (
            f"Thank you so much, {name}! We really appreciate you taking the time to share your information with us."
        )

    def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            resp = self.openai_client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            raise UpstreamServiceError(f"Text assist request failed: {exc}") from exc

        if not resp.choices:
            return ""
        content = resp.choices[0].message.content
        return content.strip() if content else ""
