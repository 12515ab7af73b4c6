"""
Structured content extraction: title, description, headings, links,
images, optional CSS/JS assets and forms.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup

from sitescan.urls import is_in_scope, normalize_url

NO_TITLE = "no title"

# Inline script bodies are cut to this many characters in the output
INLINE_SCRIPT_PREVIEW = 200
TRUNCATION_MARKER = "..."


@dataclass(slots=True)
class LinkRef:
    url: str
    text: str
    internal: bool


@dataclass(slots=True)
class ImageRef:
    src: str
    alt: str = ""


@dataclass(slots=True)
class AssetRef:
    """A stylesheet or script, either linked (url) or inline (content)."""
    type: str
    url: Optional[str] = None
    content: Optional[str] = None


@dataclass(slots=True)
class FormInput:
    type: str
    name: str = ""
    placeholder: str = ""
    required: bool = False


@dataclass(slots=True)
class FormDescriptor:
    method: str
    action: str
    inputs: List[FormInput] = field(default_factory=list)


@dataclass(slots=True)
class PageExtraction:
    """Everything pulled out of one page's HTML."""
    title: str = NO_TITLE
    description: str = ""
    headings: List[str] = field(default_factory=list)
    links: List[LinkRef] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    css: List[AssetRef] = field(default_factory=list)
    scripts: List[AssetRef] = field(default_factory=list)
    forms: List[FormDescriptor] = field(default_factory=list)


def _inner(tag) -> str:
    """Raw inner content of a tag, e.g. a <style> or <script> body."""
    return "".join(str(child) for child in tag.children)


def extract_page(url: str, html: str, domain: str, include_assets: bool = False) -> PageExtraction:
    """
    Extract the structured record for one page.

    Headings, links and images keep document order and duplicates.
    Links and images whose reference cannot be resolved are dropped.
    """
    soup = BeautifulSoup(html or "", "lxml")
    page = PageExtraction()

    title = "".join(t.get_text() for t in soup.find_all("title")).strip()
    page.title = title or NO_TITLE

    meta = soup.find("meta", attrs={"name": "description"})
    page.description = (meta.get("content") or "") if meta else ""

    page.headings = [h.get_text().strip() for h in soup.find_all("h1")]

    for link in soup.find_all("a", href=True):
        target = normalize_url(link["href"], url)
        if target:
            page.links.append(LinkRef(
                url=target,
                text=link.get_text().strip(),
                internal=is_in_scope(target, domain),
            ))

    for img in soup.find_all("img", src=True):
        src = normalize_url(img["src"], url)
        if src:
            page.images.append(ImageRef(src=src, alt=img.get("alt") or ""))

    if include_assets:
        page.css = _extract_css(soup, url)
        page.scripts = _extract_scripts(soup, url)

    page.forms = [_describe_form(form, url) for form in soup.find_all("form")]
    return page


def _extract_css(soup: BeautifulSoup, url: str) -> List[AssetRef]:
    assets: List[AssetRef] = []
    for tag in soup.select('link[rel="stylesheet"], style'):
        if tag.name == "link":
            target = normalize_url(tag.get("href"), url)
            if target:
                assets.append(AssetRef(type="external", url=target))
        else:
            assets.append(AssetRef(type="inline", content=_inner(tag)))
    return assets


def _extract_scripts(soup: BeautifulSoup, url: str) -> List[AssetRef]:
    assets: List[AssetRef] = []
    for tag in soup.find_all("script"):
        src = tag.get("src")
        if src:
            target = normalize_url(src, url)
            if target:
                assets.append(AssetRef(type="external", url=target))
            continue

        body = _inner(tag)
        if body:
            assets.append(AssetRef(
                type="inline",
                content=body[:INLINE_SCRIPT_PREVIEW] + TRUNCATION_MARKER,
            ))
    return assets


def _describe_form(form, url: str) -> FormDescriptor:
    descriptor = FormDescriptor(
        method=form.get("method") or "GET",
        action=form.get("action") or url,
    )
    for control in form.find_all(["input", "select", "textarea"]):
        descriptor.inputs.append(FormInput(
            type=control.get("type") or control.name.lower(),
            name=control.get("name") or "",
            placeholder=control.get("placeholder") or "",
            required=control.has_attr("required"),
        ))
    return descriptor
