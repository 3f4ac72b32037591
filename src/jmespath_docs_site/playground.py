"""Interactive JMESPath playground blocks.

A playground is written as a fenced code block::

    ```jmespath-interactive [expanded] [Title]
    {"json": "input"}
    ---JMESPATH---
    json
    ```

This module parses the fence tag and body, checks the JSON input and renders
the widget shell. Queries are evaluated in the browser, never here.
"""

import json
import re
import secrets
from dataclasses import dataclass

from jinja2 import Environment

FENCE_LANGUAGE = "jmespath-interactive"
EXPANDED_FLAG = "expanded"
DEFAULT_TITLE = "Interactive Example"
QUERY_SEPARATOR_RE = re.compile(r"^\s*---JMESPATH---\s*$", re.MULTILINE)
FENCE_OPEN_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
FENCE_CLOSE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})\s*$")

PLAYGROUND_CLASSES = {
    "container": "jmespath-playground",
    "toggle_button": "playground-toggle-button",
    "content": "playground-content",
    "inputs": "playground-inputs",
    "label": "playground-label",
    "json_input": "json-input",
    "invalid_json": "invalid-json",
    "error_inline": "playground-error-inline",
    "query_input": "query-input",
    "output_area": "output-area",
    "error_area": "error-area",
    "toggle_icon": "toggle-icon",
}

_TEMPLATE = Environment(autoescape=True, keep_trailing_newline=False).from_string(
    """<div class="{{ c.container }} my-6 border rounded-lg">
  <button type="button" class="{{ c.toggle_button }}" aria-expanded="{{ 'true' if expanded else 'false' }}" aria-controls="{{ ids.content_id }}">
    <span>{{ title }}</span>
    <svg class="{{ c.toggle_icon }}" xmlns="http://www.w3.org/2000/svg" fill="none" viewBox="0 0 24 24" stroke-width="2" stroke="currentColor">
      <path stroke-linecap="round" stroke-linejoin="round" d="M19.5 8.25l-7.5 7.5-7.5-7.5" />
    </svg>
  </button>
  <div id="{{ ids.content_id }}" class="{{ c.content }}"{% if not expanded %} hidden{% endif %}>
    <div class="{{ c.inputs }}">
      <div>
        <label for="{{ ids.json_input_id }}" class="{{ c.label }}">Input</label>
        <textarea id="{{ ids.json_input_id }}" class="{{ c.json_input }}{% if show_warning %} {{ c.invalid_json }}{% endif %}" spellcheck="false">{{ json_input }}</textarea>
        {%- if show_warning %}
        <p class="{{ c.error_inline }}">Initial JSON appears invalid.</p>
        {%- endif %}
      </div>
      <div>
        <label for="{{ ids.query_input_id }}" class="{{ c.label }}">Query</label>
        <textarea id="{{ ids.query_input_id }}" class="{{ c.query_input }}" spellcheck="false">{{ query }}</textarea>
      </div>
    </div>
    <div class="mt-4">
      <label class="{{ c.label }}">Result</label>
      <pre class="{{ c.output_area }}"><code class="language-json"></code></pre>
      <div class="{{ c.error_area }}"></div>
    </div>
  </div>
</div>"""
)


@dataclass(frozen=True)
class PlaygroundOptions:
    """Options parsed from the text following the fence language."""

    title: str
    expanded: bool


@dataclass(frozen=True)
class PlaygroundBody:
    """Initial JSON input and query of a playground."""

    json_input: str
    query: str
    has_separator: bool


@dataclass(frozen=True)
class JsonCheck:
    is_valid: bool
    has_content: bool

    @property
    def needs_warning(self) -> bool:
        return self.has_content and not self.is_valid


@dataclass(frozen=True)
class PlaygroundIds:
    """Element ids wiring one widget together."""

    json_input_id: str
    query_input_id: str
    content_id: str


@dataclass
class PlaygroundBlock:
    """A playground block located in a Markdown source."""

    index: int
    title: str
    file_path: str
    line_number: int
    json_input: str
    query: str
    error: str | None = None
    closed: bool = True


@dataclass(frozen=True)
class FencedBlock:
    """A top-level fenced code block, located by line.

    Attributes:
        info: Text following the opening fence.
        body: Lines between the fences, joined.
        start: Index of the opening fence line.
        end: Index one past the last line of the block.
        closed: False when the block runs to the end of the document.
    """

    info: str
    body: str
    start: int
    end: int
    closed: bool

    @property
    def is_playground(self) -> bool:
        return self.info.strip().startswith(FENCE_LANGUAGE)

    @property
    def options(self) -> str:
        return self.info.strip()[len(FENCE_LANGUAGE) :]


def _closes(line: str, fence: str) -> bool:
    match = FENCE_CLOSE_RE.match(line)
    if match is None:
        return False
    closing = match.group("fence")
    return closing[0] == fence[0] and len(closing) >= len(fence)


def _dedent(line: str, indent: int) -> str:
    stripped = len(line) - len(line.lstrip(" "))
    return line[min(stripped, indent) :]


def find_fenced_blocks(lines: list[str]) -> list[FencedBlock]:
    """Locate the top-level fenced code blocks of a Markdown body.

    A block is closed by a fence of the same character that is at least as
    long as the opening one. Fence-like lines inside a block belong to its
    body, so a playground shown inside another code block is not a block of
    its own. An unclosed block runs to the end of the document.

    Args:
        lines: Markdown body split into lines.

    Returns:
        Blocks in document order.
    """
    blocks = []
    index = 0
    while index < len(lines):
        opening = FENCE_OPEN_RE.match(lines[index])
        if opening is None or (opening.group("fence")[0] == "`" and "`" in opening.group("info")):
            index += 1
            continue

        fence = opening.group("fence")
        indent = len(opening.group("indent"))
        end = index + 1
        while end < len(lines) and not _closes(lines[end], fence):
            end += 1
        closed = end < len(lines)
        blocks.append(
            FencedBlock(
                info=opening.group("info"),
                body="\n".join(_dedent(line, indent) for line in lines[index + 1 : end]),
                start=index,
                end=end + 1 if closed else end,
                closed=closed,
            )
        )
        index = end + 1
    return blocks


def parse_fence_options(options: str) -> PlaygroundOptions:
    """Parse ``[expanded] [title]`` from the text after the fence language.

    Args:
        options: Remainder of the fence info string.

    Returns:
        PlaygroundOptions instance.
    """
    remaining = options.strip()
    expanded = False
    if remaining.startswith(EXPANDED_FLAG):
        expanded = True
        remaining = remaining[len(EXPANDED_FLAG) :].strip()
    return PlaygroundOptions(title=remaining or DEFAULT_TITLE, expanded=expanded)


def split_body(text: str) -> PlaygroundBody:
    """Split a playground body into JSON input and query.

    Without a separator line the whole body is the JSON input and the query
    is empty.
    """
    parts = QUERY_SEPARATOR_RE.split(text)
    json_input = parts[0].strip()
    query = parts[1].strip() if len(parts) > 1 else ""
    return PlaygroundBody(json_input=json_input, query=query, has_separator=len(parts) > 1)


def validate_json(text: str) -> JsonCheck:
    """Check whether ``text`` parses as JSON."""
    if not text:
        return JsonCheck(is_valid=False, has_content=False)
    try:
        json.loads(text)
    except ValueError:
        return JsonCheck(is_valid=False, has_content=True)
    return JsonCheck(is_valid=True, has_content=True)


def generate_playground_ids() -> PlaygroundIds:
    """Generate element ids sharing one random suffix."""
    suffix = secrets.token_hex(4)
    return PlaygroundIds(
        json_input_id=f"json-input-{suffix}",
        query_input_id=f"query-input-{suffix}",
        content_id=f"playground-content-{suffix}",
    )


def render_playground(body_text: str, options: PlaygroundOptions) -> str:
    """Render the widget shell for one playground block.

    Args:
        body_text: Raw text between the fences.
        options: Parsed fence options.

    Returns:
        HTML markup of the widget.
    """
    body = split_body(body_text)
    check = validate_json(body.json_input)
    return _TEMPLATE.render(
        c=PLAYGROUND_CLASSES,
        ids=generate_playground_ids(),
        title=options.title,
        expanded=options.expanded,
        json_input=body.json_input,
        query=body.query,
        show_warning=check.needs_warning,
    )


def extract_playground_blocks(markdown_text: str, file_path: str) -> list[PlaygroundBlock]:
    """Locate every playground block in a Markdown body.

    Blocks without a separator line are returned with ``error`` set.

    Args:
        markdown_text: Markdown body without front matter.
        file_path: Name of the file for reporting.

    Returns:
        Blocks in document order.
    """
    blocks = []
    fenced = [block for block in find_fenced_blocks(markdown_text.split("\n")) if block.is_playground]
    for index, fenced_block in enumerate(fenced):
        body = split_body(fenced_block.body)
        title = fenced_block.options.strip() or f"Block {index + 1}"
        error = None
        if not body.has_separator:
            error = "Invalid block format: expected JSON and JMESPath separated by ---JMESPATH---"
        blocks.append(
            PlaygroundBlock(
                index=index,
                title=title,
                file_path=file_path,
                line_number=fenced_block.start + 1,
                json_input=body.json_input,
                query=body.query,
                error=error,
                closed=fenced_block.closed,
            )
        )
    return blocks


def check_playground_block(block: PlaygroundBlock) -> tuple[list[str], list[str]]:
    """Check the shape of a playground block without running its query.

    Returns:
        Tuple of (errors, warnings).
    """
    errors: list[str] = []
    warnings: list[str] = []
    if not block.closed:
        warnings.append("Unclosed fence runs to the end of the document")
    if block.error:
        errors.append(block.error)
        return errors, warnings

    if not block.json_input:
        warnings.append("Empty JSON input")
    else:
        try:
            json.loads(block.json_input)
        except ValueError as exc:
            errors.append(f"Invalid JSON: {exc}")

    if not block.query:
        warnings.append("Empty JMESPath query")
    return errors, warnings
