"""LLM client utilities.

This module provides a thin ``LLMClient`` wrapper around provider SDKs, the
Jinja prompt used to ask for a paper analysis, and parsers for the analysis
that comes back: a markdown document with YAML frontmatter metadata and a
fenced ``json`` block listing the paper's references. The client retries
with exponential backoff, selects provider/model from arguments, environment
variables or ``config/config.yaml``, and emits standard ``logging`` messages.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from jinja2 import Environment, FileSystemLoader

from .models import Creator, ParsedReference
from .refs.segmenter import MAX_AUTHORS_CHARS, MAX_TEXT_CHARS, MAX_TITLE_CHARS
from .text_utils import clean_title

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"
DEFAULT_MAX_PROMPT_CHARS = 60000

FRONTMATTER_RE = re.compile(r"\A\s*---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.S)
JSON_BLOCK_RE = re.compile(r"```json\s*\n?([\s\S]*?)\n?```")
WIKI_LINK_RE = re.compile(r"^\[\[(.*?)\]\]$")

_FALLBACK_FIELDS = {
    "title": re.compile(r"^title:\s*[\"']?(.+?)[\"']?$", re.M),
    "publication": re.compile(r"^publication:\s*[\"']?(.+?)[\"']?$", re.M),
    "year": re.compile(r"^year:\s*(\d+)", re.M),
    "doi": re.compile(r"^doi:\s*[\"']?(.+?)[\"']?$", re.M),
}


def _prompt_env() -> Environment:
    return Environment(loader=FileSystemLoader(str(PROMPTS_DIR)), keep_trailing_newline=True)


def render_system_prompt() -> str:
    return _prompt_env().get_template("analysis_system.j2").render()


def render_analysis_prompt(paper_text: str, max_chars: int = DEFAULT_MAX_PROMPT_CHARS) -> str:
    text = paper_text or ""
    truncated = len(text) > max_chars
    return _prompt_env().get_template("analysis_user.j2").render(
        paper_text=text[:max_chars],
        truncated=truncated,
    )


class LLMClientError(Exception):
    """Base exception for LLM client failures."""


class LLMProviderError(LLMClientError):
    """Raised when the configured provider is unsupported."""


class LLMResponseError(LLMClientError):
    """Raised when the provider returns an error after retries."""


class LLMClient:
    """Thin client wrapper for LLM providers.

    Parameters may be supplied directly, via environment variables, or via
    ``config/config.yaml``.  ``LLM_PROVIDER``/``LLM_MODEL`` environment
    variables take precedence over config values. ``client`` injects an
    already-built SDK client (used by tests).
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        config_path: Optional[str | Path] = "config/config.yaml",
        max_retries: int = 3,
        backoff: float = 1.0,
        client: Any = None,
    ) -> None:
        cfg_provider: Optional[str] = None
        cfg_model: Optional[str] = None

        if config_path and Path(config_path).exists():
            try:
                cfg = yaml.safe_load(Path(config_path).read_text(encoding="utf-8")) or {}
                llm_cfg = cfg.get("llm") or {}
                cfg_provider = llm_cfg.get("provider")
                cfg_model = llm_cfg.get("model")
            except (OSError, yaml.YAMLError) as exc:
                logger.warning("Failed to load config %s: %s", config_path, exc)

        self.provider = provider or os.getenv("LLM_PROVIDER") or cfg_provider or "openai"
        self.model = model or os.getenv("LLM_MODEL") or cfg_model or "gpt-4o"
        self.max_retries = max_retries
        self.backoff = backoff

        if self.provider != "openai":
            raise LLMProviderError(f"Unsupported provider: {self.provider}")
        if client is None:
            from openai import OpenAI

            client = OpenAI()  # reads API key/base URL from env
        self._client = client

    # ------------------------------------------------------------------
    def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self._client.chat.completions.create(
                    model=self.model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    **kwargs,
                )
                return resp.choices[0].message.content or ""
            except Exception as exc:  # catch provider SDK errors
                if attempt == self.max_retries:
                    logger.error(
                        "LLM request failed after %s attempts", attempt, exc_info=True
                    )
                    raise LLMResponseError(str(exc)) from exc

                sleep_s = self.backoff * (2 ** (attempt - 1))
                logger.warning(
                    "LLM request failed (attempt %s/%s): %s; retrying in %.1fs",
                    attempt,
                    self.max_retries,
                    exc,
                    sleep_s,
                )
                time.sleep(sleep_s)
        raise LLMResponseError("max_retries must be at least 1")

    def text_call(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 4000,
    ) -> str:
        """Return the model's plain-text (markdown) answer."""
        return self._complete(
            system_prompt, user_prompt,
            temperature=temperature, max_tokens=max_tokens, json_mode=False,
        )

    def json_call(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: int = 800,
    ) -> Dict[str, Any]:
        """Return a JSON object response from the model.

        ``LLMResponseError`` is raised if all attempts fail or the answer is
        not valid JSON.
        """
        text = self._complete(
            system_prompt, user_prompt,
            temperature=temperature, max_tokens=max_tokens, json_mode=True,
        )
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise LLMResponseError(f"Model returned invalid JSON: {exc}") from exc


def analyze_paper(
    client: LLMClient, paper_text: str, max_chars: int = DEFAULT_MAX_PROMPT_CHARS
) -> str:
    """Ask the model for a markdown analysis of ``paper_text``."""
    return client.text_call(render_system_prompt(), render_analysis_prompt(paper_text, max_chars))


# Parsing ---------------------------------------------------------------------
def parse_frontmatter(analysis: str) -> Dict[str, Any]:
    """Return the YAML frontmatter of an analysis as a dict.

    Malformed YAML falls back to line-oriented regexes for ``title``,
    ``publication``, ``year`` and ``doi``.
    """
    m = FRONTMATTER_RE.match(analysis or "")
    if not m:
        return {}
    try:
        data = yaml.safe_load(m.group(1))
    except yaml.YAMLError as exc:
        logger.warning("Frontmatter is not valid YAML, using regex fallback: %s", exc)
        data = {}
        block = m.group(1)
        for key, pattern in _FALLBACK_FIELDS.items():
            found = pattern.search(block)
            if found:
                data[key] = int(found.group(1)) if key == "year" else found.group(1)
    return data if isinstance(data, dict) else {}


def extract_json_block(analysis: str) -> Optional[str]:
    m = JSON_BLOCK_RE.search(analysis or "")
    return m.group(1) if m else None


def _opt_str(value: Any, limit: int) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s[:limit] if s else None


def parse_llm_references(analysis: str) -> List[ParsedReference]:
    """References listed in the analysis' fenced json block.

    Entries are coerced to the same shape and bounds the extraction engine
    produces. Entries without text, and everything when the block is not a
    JSON array, are skipped.
    """
    block = extract_json_block(analysis)
    if block is None:
        return []
    try:
        raw = json.loads(block)
    except json.JSONDecodeError as exc:
        logger.info("Failed to parse references from analysis: %s", exc)
        return []
    if not isinstance(raw, list):
        return []

    refs: List[ParsedReference] = []
    for position, entry in enumerate(raw, start=1):
        if not isinstance(entry, dict):
            continue
        text = _opt_str(entry.get("text"), MAX_TEXT_CHARS)
        if not text:
            continue
        try:
            index = int(entry.get("index", position))
        except (TypeError, ValueError):
            index = position
        refs.append(
            ParsedReference(
                index=index if index > 0 else position,
                text=text,
                doi=_opt_str(entry.get("doi"), MAX_TEXT_CHARS),
                authors=_opt_str(entry.get("authors"), MAX_AUTHORS_CHARS),
                title=_opt_str(entry.get("title"), MAX_TITLE_CHARS),
                year=_opt_str(entry.get("year"), 4),
            )
        )
    return refs


def creators_from_authors(authors: Iterable[Any]) -> List[Creator]:
    """``["[[Jane Q. Doe]]", "Li Wei"]`` -> creators with the last token as last name."""
    creators: List[Creator] = []
    for author in authors:
        name = WIKI_LINK_RE.sub(r"\1", str(author).strip()).strip()
        if not name:
            continue
        parts = name.split()
        creators.append(Creator(last_name=parts[-1], first_name=" ".join(parts[:-1])))
    return creators


def analysis_updates(
    analysis: str,
    current_tags: Iterable[str] = (),
    sync_metadata: bool = True,
) -> Dict[str, Any]:
    """Item field updates derived from an analysis' frontmatter.

    Tags are merged into ``current_tags``; bibliographic fields are only
    produced when ``sync_metadata`` is set.
    """
    data = parse_frontmatter(analysis)
    updates: Dict[str, Any] = {"ai_analysis": analysis}

    tags = data.get("tags")
    if isinstance(tags, list):
        merged = list(current_tags)
        for tag in tags:
            tag = str(tag)
            if tag not in merged:
                merged.append(tag)
        updates["tags"] = merged

    if not sync_metadata:
        return updates

    if data.get("title"):
        updates["title"] = clean_title(data["title"])
    if data.get("publication"):
        updates["publication_title"] = clean_title(data["publication"])
    if data.get("year"):
        updates["date"] = str(data["year"])
    if data.get("doi"):
        updates["doi"] = str(data["doi"])
    if data.get("url"):
        updates["url"] = str(data["url"])
    if isinstance(data.get("authors"), list):
        updates["creators"] = creators_from_authors(data["authors"])
    return updates


__all__ = [
    "LLMClient",
    "LLMClientError",
    "LLMProviderError",
    "LLMResponseError",
    "analysis_updates",
    "analyze_paper",
    "creators_from_authors",
    "extract_json_block",
    "parse_frontmatter",
    "parse_llm_references",
    "render_analysis_prompt",
    "render_system_prompt",
]
