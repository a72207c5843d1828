"""Base suggester implementing the Template Method pattern.

All providers share the same suggestion algorithm:
    suggest() → _build_prompt()
              → _call_with_retry() → _call_api()   ← only this differs per provider
              → _clean()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod

from revfix_core.exceptions import ExternalServiceError
from revfix_core.utils.code import describe_file
from revfix_core.utils.patch import strip_diff_markers

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 800

_COMMENT_PREFIXES = ("//", "#", "*", "/*")


class BaseSuggester(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def suggest(self, code_context: str, comment: str, file_name: str, lines: list[int]) -> str:
        """Return replacement text for ``code_context``.

        An empty string means the model had nothing to offer. Transport
        failures raise ExternalServiceError once retries are exhausted.
        """
        prompt = self._build_prompt(code_context, comment, file_name, lines)
        return self._clean(self._call_with_retry(prompt))

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, prompt: str) -> str:
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(prompt) or ""
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise ExternalServiceError(f"{self.__class__.__name__} API error: {e}") from e
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        return ""

    def _build_prompt(self, code_context: str, comment: str, file_name: str, lines: list[int]) -> str:
        start, end = min(lines), max(lines)
        target = f"{start}" if start == end else f"{start} to {end}"
        file_type, guidance = describe_file(file_name)
        code = strip_diff_markers(code_context)
        focus = _focus_line(code, single_line=len(lines) == 1)

        return f"""You are an expert code reviewer helping implement a specific code improvement.

**CONTEXT ANALYSIS:**
File: {file_name} ({file_type})
Target Line: {target}
Review Comment: "{comment}"

**CODE CONTEXT:**
{code}

**FOCUS LINE:**
{focus or 'Line not clearly identified'}

**TASK:**
Analyze the reviewer's comment and apply it specifically to line {target}.

**REQUIREMENTS:**
1. Understand what the reviewer is asking for.
2. Look at the target line in context to understand its purpose and structure.
3. Apply the requested change to the target line(s) only.
4. Keep all other lines exactly as they are.
5. {guidance}

**OUTPUT FORMAT:**
Return the complete code block with your changes applied, without explanations.
Show all the context lines but only modify the line(s) mentioned in the review.

**CORRECTED CODE:**"""

    def _clean(self, raw: str) -> str:
        """Strip a single outer markdown code fence around the answer."""
        cleaned = re.sub(r"^```[\w+-]*[ \t]*\n?", "", raw.strip())
        cleaned = re.sub(r"\n?```$", "", cleaned)
        return cleaned


def _focus_line(code: str, single_line: bool) -> str:
    code_lines = code.split("\n")
    if not single_line or len(code_lines) == 1:
        return code_lines[0] if code_lines else ""
    for line in code_lines:
        stripped = line.strip()
        if stripped and not stripped.startswith(_COMMENT_PREFIXES):
            return line
    return ""
