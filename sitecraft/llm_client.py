import re
import logging
from typing import Sequence

import httpx

from sitecraft.settings.config import settings

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    pass


#----------fence stripping---------------

_FENCE_OPEN_RE = re.compile(r"```[a-z]*\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"```$")


def sanitize_html(out: str) -> str:
    """Drop markdown code-fence markers the model wraps around the document."""
    if not out:
        return ""
    s = _FENCE_OPEN_RE.sub("", out)
    s = _FENCE_CLOSE_RE.sub("", s)
    return s.strip()


#----------transport---------------

async def chat_completion(messages: Sequence[dict], *, max_tokens: int) -> str:
    """
    Single non-streaming call to an OpenAI-compatible /chat/completions endpoint.
    No retries; transport and HTTP errors surface as LLMError.
    """
    url = f"{settings.LLM_BASE_URL.rstrip('/')}/chat/completions"
    headers = {}
    if settings.LLM_API_KEY:
        headers["Authorization"] = f"Bearer {settings.LLM_API_KEY}"

    payload = {
        "model": settings.LLM_MODEL,
        "messages": list(messages),
        "max_tokens": max_tokens,
    }

    try:
        async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
            r = await client.post(url, json=payload, headers=headers)
            r.raise_for_status()
            data = r.json()
    except Exception as e:
        logger.warning("LLM call to %s failed: %s", url, e)
        raise LLMError(f"LLM request failed: {e}") from e

    choices = (data or {}).get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    return message.get("content") or ""


#----------prompt enhancement---------------

ENHANCE_SYSTEM_PROMPT = """
You are a prompt enhancement specialist. The user wants to make changes to their website. Enhance their request to be more specific and actionable for a web developer.

Enhance this by:
1. Being specific about what elements to change
2. Mentioning design details (colors, spacing, sizes)
3. Clarifying the desired outcome
4. Using clear technical terms

Return ONLY the enhanced request, nothing else. Keep it concise (1-2 sentences).
""".strip()


async def enhance_prompt(message: str) -> str:
    """Rewrite a user's change request into a concrete instruction for the code step."""
    out = await chat_completion(
        [
            {"role": "system", "content": ENHANCE_SYSTEM_PROMPT},
            {"role": "user", "content": f'User\'s request: "{message}"'},
        ],
        max_tokens=settings.ENHANCE_MAX_TOKENS,
    )
    out = (out or "").strip()
    if not out:
        raise LLMError("Empty response from prompt enhancement.")
    return out


#----------code generation---------------

CODE_SYSTEM_PROMPT = """
You are an expert web developer.

CRITICAL REQUIREMENTS:
- Return ONLY the complete updated HTML code with the requested changes.
- Use Tailwind CSS for ALL styling (NO custom CSS).
- Use Tailwind utility classes for all styling changes.
- Include all JavaScript in <script> tags before closing </body>
- Make sure it's a complete, standalone HTML document with Tailwind CSS
- Return the HTML Code Only, nothing else. No explanations, no markdown code fences.

Apply the requested changes while maintaining the Tailwind CSS styling approach.
""".strip()


async def generate_code(current_code: str, instruction: str) -> str:
    """
    Ask the model for a full replacement document. Returns the raw text, which
    may be empty or fenced; callers sanitize it.
    """
    user = (
        f'Here is the current website code: "{current_code or ""}" '
        f'The user wants this change: "{instruction}"'
    )
    return await chat_completion(
        [
            {"role": "system", "content": CODE_SYSTEM_PROMPT},
            {"role": "user", "content": user},
        ],
        max_tokens=settings.CODE_MAX_TOKENS,
    )
