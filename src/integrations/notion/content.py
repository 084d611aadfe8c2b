from __future__ import annotations
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import markdown as md
from bs4 import (  # type: ignore
    BeautifulSoup,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from integrations.github.models import Content, DraftIssue, Issue

# Notion limits: 2000 chars per text object, 100 rich text objects per block
TEXT_LIMIT = 2000
RICH_TEXT_LIMIT = 100

# Markup that never renders as text (issue template hints etc.)
HIDDEN_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

# Notion only accepts external images whose URL names an image file
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp", ".tif", ".tiff", ".heic", ".ico")

LIST_ITEM_RE = re.compile(r"^([ \t]*)([-*+]|\d+[.)])([ \t]+)")
TASK_RE = re.compile(r"^\[([ xX])\]\s+")

CODE_LANGUAGES = {
    "bash", "c", "c#", "c++", "css", "diff", "docker", "go", "graphql", "html",
    "java", "javascript", "json", "kotlin", "makefile", "markdown", "php",
    "python", "ruby", "rust", "scala", "shell", "sql", "swift", "typescript",
    "xml", "yaml",
}
CODE_ALIASES = {
    "sh": "shell", "zsh": "shell", "console": "shell", "js": "javascript",
    "ts": "typescript", "py": "python", "yml": "yaml", "rb": "ruby",
    "cpp": "c++", "csharp": "c#", "cs": "c#", "dockerfile": "docker", "md": "markdown",
}


def build_item_markdown(content: Optional[Content]) -> str:
    """Concatenate URL, body and comments of an item into one markdown text."""
    if content is None:
        return ""
    if isinstance(content, DraftIssue):
        return content.body or ""
    if isinstance(content, Issue):  # PullRequest shares Issue's shape
        text = ""
        if content.url:
            text = content.url + "\n\n"
        if content.body:
            text += content.body
        for comment in content.comments:
            text += "\n\n---\n\n"
            if comment.author:
                text += f"**@{comment.author}** commented:\n\n"
            text += comment.body or ""
        return text
    raise TypeError(f"Unhandled content type: {type(content).__name__}")


def _annotations(a: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "bold": a.get("bold", False),
        "italic": a.get("italic", False),
        "strikethrough": a.get("strikethrough", False),
        "underline": a.get("underline", False),
        "code": a.get("code", False),
        "color": "default",
    }


def _text(content: str, ann: Optional[Dict[str, Any]] = None, link: Optional[str] = None) -> Dict[str, Any]:
    text: Dict[str, Any] = {"content": content}
    if link:
        text["link"] = {"url": link}
    return {"type": "text", "text": text, "annotations": _annotations(ann or {})}


def _split_long(rich: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for frag in rich:
        content = frag["text"]["content"]
        if len(content) <= TEXT_LIMIT:
            out.append(frag)
            continue
        for i in range(0, len(content), TEXT_LIMIT):
            piece = dict(frag)
            piece["text"] = dict(frag["text"], content=content[i:i + TEXT_LIMIT])
            out.append(piece)
    return out[:RICH_TEXT_LIMIT]


def plain_rich_text(content: str) -> List[Dict[str, Any]]:
    return _split_long([_text(content)])


def _rich(nodes) -> List[Dict[str, Any]]:
    rich: List[Dict[str, Any]] = []

    def recur(n, ann=None):
        a = dict(ann or {})
        if isinstance(n, HIDDEN_STRINGS):
            return
        if isinstance(n, NavigableString):
            txt = str(n)
            if txt:
                rich.append(_text(txt, a))
            return
        if not isinstance(n, Tag):
            return
        t = n.name.lower()
        if t in ("ul", "ol"):
            return
        if t == "br":
            rich.append(_text("\n", a))
            return
        if t in ("strong", "b"):
            a["bold"] = True
        elif t in ("em", "i"):
            a["italic"] = True
        elif t in ("del", "s", "strike"):
            a["strikethrough"] = True
        elif t == "code":
            a["code"] = True
        if t == "a":
            href = n.get("href") or ""
            text = n.get_text() or href
            if href.startswith(("http://", "https://")) and text:
                rich.append(_text(text, a, link=href))
                return
        if t == "img":
            src = n.get("src") or ""
            if src:
                rich.append(_text(n.get("alt") or src, a, link=src if src.startswith(("http://", "https://")) else None))
            return
        for c in n.children:
            recur(c, a)

    for n in nodes:
        recur(n, {})
    # trim leading/trailing newlines markdown leaves around inline content
    while rich and not rich[-1]["text"]["content"].strip():
        rich.pop()
    while rich and not rich[0]["text"]["content"].strip():
        rich.pop(0)
    return _split_long(rich) or [_text("")]


def _code_language(tag: Tag) -> str:
    code = tag.find("code")
    classes = (code.get("class") if isinstance(code, Tag) else None) or []
    for cls in classes:
        if cls.startswith("language-"):
            lang = cls[len("language-"):].lower()
            lang = CODE_ALIASES.get(lang, lang)
            if lang in CODE_LANGUAGES:
                return lang
    return "plain text"


def _block(kind: str, rich: List[Dict[str, Any]], **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"rich_text": rich}
    body.update(extra)
    return {"object": "block", "type": kind, kind: body}


def _is_image_url(src: str) -> bool:
    if not src.startswith(("http://", "https://")):
        return False
    return urlparse(src).path.lower().endswith(IMAGE_EXTENSIONS)


def _task_state(rich: List[Dict[str, Any]]) -> Optional[bool]:
    """Strip a leading ``[ ]`` / ``[x]`` marker; return checked or None."""
    if not rich:
        return None
    first = rich[0]["text"]["content"]
    m = TASK_RE.match(first)
    if not m:
        return None
    rest = first[m.end():]
    if rest:
        rich[0] = dict(rich[0], text=dict(rich[0]["text"], content=rest))
    else:
        rich.pop(0)
    if not rich:
        rich.append(_text(""))
    return m.group(1) != " "


def _list_items(tag: Tag, numbered: bool) -> List[Dict[str, Any]]:
    key = "numbered_list_item" if numbered else "bulleted_list_item"
    items: List[Dict[str, Any]] = []
    for li in tag.find_all("li", recursive=False):
        inline = [
            c for c in li.children
            if not (isinstance(c, Tag) and c.name in ("ul", "ol", "p")) and not isinstance(c, HIDDEN_STRINGS)
        ]
        paras = li.find_all("p", recursive=False)
        if paras and not "".join(str(c) for c in inline).strip():
            inline = list(paras[0].children)
        children: List[Dict[str, Any]] = []
        for sub in li.find_all(["ul", "ol"], recursive=False):
            children.extend(_list_items(sub, numbered=(sub.name == "ol")))
        extra: Dict[str, Any] = {"children": children} if children else {}
        rich = _rich(inline)
        checked = None if numbered else _task_state(rich)
        if checked is not None:
            items.append(_block("to_do", rich, checked=checked, **extra))
        else:
            items.append(_block(key, rich, **extra))
    return items


def _table(tag: Tag) -> Optional[Dict[str, Any]]:
    rows = []
    has_header = False
    for tr in tag.find_all("tr"):
        cells = tr.find_all(["th", "td"], recursive=False)
        if not cells:
            continue
        if not rows and all(c.name == "th" for c in cells):
            has_header = True
        rows.append([_rich(c.contents) for c in cells])
    if not rows:
        return None
    width = max(len(r) for r in rows)
    children = [
        {
            "object": "block",
            "type": "table_row",
            "table_row": {"cells": r + [[] for _ in range(width - len(r))]},
        }
        for r in rows
    ]
    return {
        "object": "block",
        "type": "table",
        "table": {
            "table_width": width,
            "has_column_header": has_header,
            "has_row_header": False,
            "children": children,
        },
    }


def html_to_blocks(html: str) -> List[Dict[str, Any]]:
    """Convert the HTML that markdown rendering produces to Notion blocks.

    Supported:
    - h1..h6 -> heading_1/2/3 (deeper levels clamp to heading_3)
    - p -> paragraph (a paragraph holding only an image file URL -> image;
      other image sources stay a linked paragraph)
    - ul/ol/li -> bulleted/numbered list items, nested lists as children
    - li starting with [ ] / [x] -> to_do
    - table -> table with table_row children
    - blockquote -> quote
    - hr -> divider
    - pre/code -> code block
    Inline: strong/b, em/i, del/s, code, a href
    HTML comments and declarations are dropped.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    blocks: List[Dict[str, Any]] = []
    for node in list(soup.children):
        if isinstance(node, HIDDEN_STRINGS):
            continue
        if isinstance(node, NavigableString):
            txt = str(node).strip()
            if txt:
                blocks.append(_block("paragraph", plain_rich_text(txt)))
            continue
        if not isinstance(node, Tag):
            continue
        name = node.name.lower()
        if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
            key = f"heading_{min(max(int(name[1]), 1), 3)}"
            blocks.append(_block(key, _rich(node.contents)))
        elif name == "p":
            imgs = node.find_all("img")
            if len(imgs) == 1 and not node.get_text(strip=True):
                src = imgs[0].get("src") or ""
                if _is_image_url(src):
                    blocks.append({"object": "block", "type": "image", "image": {"type": "external", "external": {"url": src}}})
                    continue
            if node.get_text(strip=True) or node.find("img"):
                blocks.append(_block("paragraph", _rich(node.contents)))
        elif name in ("ul", "ol"):
            blocks.extend(_list_items(node, numbered=(name == "ol")))
        elif name == "blockquote":
            txt = node.get_text("\n").strip()
            if txt:
                blocks.append(_block("quote", plain_rich_text(txt)))
        elif name == "pre":
            blocks.append(_block("code", plain_rich_text(node.get_text().rstrip("\n")), language=_code_language(node)))
        elif name == "hr":
            blocks.append({"object": "block", "type": "divider", "divider": {}})
        elif name == "table":
            table = _table(node)
            if table:
                blocks.append(table)
        else:
            # raw html and the rest: keep the text
            if node.get_text(strip=True):
                blocks.append(_block("paragraph", plain_rich_text(node.get_text("\n").strip())))
    return blocks


def normalize_list_indent(text: str) -> str:
    """Re-indent nested list items to the 4 spaces Python-Markdown expects.

    GitHub nests lists under the parent's content column (often 2 spaces).
    Nesting depth is taken from the relative indent of consecutive items;
    fenced code is left untouched.
    """
    out: List[str] = []
    levels: List[int] = []
    fenced = False
    for line in (text or "").split("\n"):
        if line.lstrip().startswith(("```", "~~~")):
            fenced = not fenced
            out.append(line)
            continue
        m = None if fenced else LIST_ITEM_RE.match(line)
        indent = len(m.group(1).expandtabs(4)) if m else 0
        # 4+ spaces with no open list is an indented code block
        if m and (levels or indent < 4):
            while levels and levels[-1] > indent:
                levels.pop()
            if not levels or indent > levels[-1]:
                levels.append(indent)
            line = " " * (4 * (len(levels) - 1)) + line[len(m.group(1)):]
        elif line.strip() and not line[:1].isspace() and not fenced:
            levels = []
        out.append(line)
    return "\n".join(out)


def markdown_to_blocks(text: str) -> List[Dict[str, Any]]:
    html = md.markdown(normalize_list_indent(text or ""), extensions=["fenced_code", "sane_lists", "tables"])
    return html_to_blocks(html)


def fallback_blocks(text: str) -> List[Dict[str, Any]]:
    """Single plain paragraph used when markdown conversion fails."""
    return [_block("paragraph", [_text((text or "")[:TEXT_LIMIT])])]


def build_page_blocks(content: Optional[Content], *, title: str = "", block_limit: int = 100) -> List[Dict[str, Any]]:
    """Render an item's content as page blocks, capped at ``block_limit``."""
    text = build_item_markdown(content)
    if not text:
        return []
    try:
        blocks = markdown_to_blocks(text)
    except Exception as e:
        print(f"[import] could not convert markdown to blocks for \"{title}\": {e}")
        return fallback_blocks(text)
    if len(blocks) > block_limit:
        print(f"[import] content too long for \"{title}\", truncating {len(blocks)} blocks to {block_limit}")
        blocks = blocks[:block_limit]
    return blocks
