"""HTML listing sheet + WeasyPrint PDF generation."""

import html
import re
from dataclasses import dataclass

from loguru import logger

from .models import ListingRecord, PdfRenderError, RenderResult


@dataclass(frozen=True)
class PageConfig:
    size: str = "A4"
    orientation: str = "portrait"
    margin_mm: int = 15

    def css(self) -> str:
        return f"@page {{ size: {self.size} {self.orientation}; margin: {self.margin_mm}mm; }}"


@dataclass(frozen=True)
class TemplateOptions:
    about_word_limit: int = 100
    wholesale_mode: str = "omit"  # "omit" or "placeholder"
    wholesale_placeholder: str = "Contact us for wholesale pricing and availability."
    compact: bool = False
    brand_tagline: str = "Fresh &bull; Local &bull; Sustainable"
    footer_note: str = "Generated from Eat Local First &bull; Visit eatlocalfirst.org"
    creator: str = "Eat Local First Directory"


QR_HINT = "Scan the QR code to learn more."


def trim_words(text: str, limit: int) -> tuple[str, bool]:
    """
    Cut text to at most `limit` words; returns (text, was_truncated).

    The original whitespace between kept words (line breaks included) is
    preserved.
    """
    words = list(re.finditer(r"\S+", text))
    if len(words) <= limit:
        return text, False
    if limit <= 0:
        return "", True
    return text[: words[limit - 1].end()], True


def _text(value: str) -> str:
    """Escape user text and keep its line breaks."""
    return html.escape(value).replace("\r\n", "\n").replace("\n", "<br>")


def _section(title: str, body: str, body_class: str = "section-content") -> str:
    return f"""
    <div class="section">
        <div class="section-title">{title}</div>
        <div class="{body_class}">{body}</div>
    </div>
    """


def _contact_item(label: str, value: str) -> str:
    if not value:
        return ""
    return f'<div class="contact-item"><span class="contact-label">{label}:</span> {_text(value)}</div>'


def _about_section(record: ListingRecord, options: TemplateOptions) -> str:
    if not record.about:
        return ""
    trimmed, truncated = trim_words(record.about, options.about_word_limit)
    body = _text(trimmed)
    if truncated:
        body += f'&hellip;<div class="qr-hint">{QR_HINT}</div>'
    return _section("About Us", body)


def _wholesale_section(record: ListingRecord, options: TemplateOptions) -> str:
    if record.wholesale_info:
        return _section("Wholesale", _text(record.wholesale_info))
    if options.wholesale_mode == "placeholder":
        return _section("Wholesale", _text(options.wholesale_placeholder))
    return ""


def _certification_badges(certifications: str) -> str:
    badges = [
        f'<span class="certification-badge">{html.escape(cert.strip())}</span>'
        for cert in certifications.split(",")
        if cert.strip()
    ]
    return " ".join(badges)


def _sections(record: ListingRecord, options: TemplateOptions) -> str:
    parts = [_about_section(record, options)]
    if record.products:
        # Markup built by classify_products(); term names are already escaped.
        parts.append(_section("Products &amp; Services", record.products, "section-content products-list"))
    if record.retail_info:
        parts.append(_section("Retail Information", _text(record.retail_info)))
    parts.append(_wholesale_section(record, options))
    if record.csa_info:
        parts.append(_section("CSA Program", _text(record.csa_info)))
    if record.growing_practices:
        parts.append(_section("Growing Practices", _text(record.growing_practices)))
    if record.certifications:
        parts.append(_section("Certifications", _certification_badges(record.certifications), "badges"))
    if record.payment_methods:
        parts.append(_section("Payment Methods", _text(record.payment_methods)))
    return "".join(p for p in parts if p)


def build_listing_html(
    record: ListingRecord,
    options: TemplateOptions = TemplateOptions(),
    page: PageConfig = PageConfig(),
) -> str:
    """
    Build the full listing sheet.

    Sections are rendered only when their field has content (Wholesale can
    instead show a placeholder, see TemplateOptions.wholesale_mode). All
    record text is escaped except `products`, which the classifier emits as
    markup.
    """
    name = html.escape(record.name)
    gap = 10 if options.compact else 20

    business_type = (
        f'<div class="business-type">{html.escape(record.business_type)}</div>'
        if record.business_type
        else ""
    )

    hero_image = ""
    if record.hero_image_url:
        hero_image = f"""
        <div class="hero">
            <img src="{html.escape(record.hero_image_url)}" alt="{name}">
        </div>
        """

    contact_items = "".join(
        [
            _contact_item("Location", record.location),
            _contact_item("Address", record.address if record.address != record.location else ""),
            _contact_item("Email", record.email),
            _contact_item("Phone", record.phone),
            _contact_item("Website", record.website),
        ]
    )

    qr_block = ""
    if record.qr_code_data:
        qr_block = f"""
        <div class="qr-title">Visit Online</div>
        <img class="qr-image" src="{html.escape(record.qr_code_data)}" alt="QR Code">
        """
    where = html.escape(record.location or record.address or "Location not specified")

    footer_url = html.escape(record.website or record.canonical_url)
    updated = f"<div>Updated: {html.escape(record.updated_at)}</div>" if record.updated_at else ""

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{name} - Listing</title>
<meta name="generator" content="{html.escape(options.creator)}">
<style>
    {page.css()}

    body {{
        font-family: 'DejaVu Sans', Arial, sans-serif;
        font-size: 11pt;
        line-height: 1.4;
        color: #333;
        margin: 0;
        padding: 0;
    }}

    .header {{
        background: linear-gradient(135deg, #004D43 0%, #6AA338 100%);
        color: white;
        padding: 18px 20px;
        text-align: center;
        border-radius: 8px;
        margin-bottom: {gap}px;
    }}

    .business-name {{
        font-size: 20pt;
        font-weight: bold;
        letter-spacing: 0.02em;
    }}

    .business-type {{
        display: inline-block;
        margin-top: 8px;
        background: rgba(255,255,255,0.18);
        padding: 4px 12px;
        border-radius: 12px;
        font-size: 9pt;
        font-weight: bold;
        text-transform: uppercase;
    }}

    .hero {{
        text-align: center;
        margin: 8px 0 {gap}px 0;
    }}

    .hero img {{
        height: 164px;
        width: auto;
    }}

    table.contact-block {{
        width: 100%;
        border-collapse: collapse;
        margin-bottom: {gap}px;
    }}

    td.contact-cell {{
        width: 65%;
        vertical-align: top;
        padding-right: 20px;
    }}

    td.qr-cell {{
        width: 35%;
        vertical-align: top;
    }}

    .contact-section {{
        background: #f0f0f0;
        padding: 15px;
        border-left: 4px solid #6AA338;
    }}

    .contact-heading {{
        font-weight: bold;
        color: #004D43;
        margin-bottom: 10px;
    }}

    .contact-item {{
        margin-bottom: 6px;
    }}

    .contact-label {{
        font-weight: bold;
        color: #004D43;
    }}

    .qr-section {{
        text-align: center;
        padding: 12px;
        border: 1px solid #ddd;
        font-size: 10pt;
    }}

    .qr-title {{
        font-size: 12pt;
        font-weight: bold;
        color: #004D43;
        margin-bottom: 8px;
    }}

    .qr-image {{
        width: 100px;
        height: 100px;
    }}

    .section {{
        margin: {gap}px 0;
    }}

    .section-title {{
        font-size: 14pt;
        font-weight: bold;
        color: #004D43;
        margin-bottom: 8px;
        border-bottom: 2px solid #6AA338;
        padding-bottom: 4px;
    }}

    .section-content {{
        line-height: 1.5;
    }}

    .products-list {{
        background: #f0f8ff;
        padding: 12px;
        border: 1px solid #d6e9f0;
    }}

    .qr-hint {{
        margin-top: 6px;
        font-style: italic;
        color: #6AA338;
    }}

    .certification-badge {{
        display: inline-block;
        background: #6AA338;
        color: white;
        padding: 4px 10px;
        border-radius: 12px;
        font-size: 9pt;
        font-weight: bold;
        margin: 2px;
        text-transform: uppercase;
    }}

    .footer {{
        margin-top: 30px;
        padding-top: 15px;
        border-top: 2px solid #e0e0e0;
        text-align: center;
        font-size: 9pt;
        color: #666;
    }}

    .website-url {{
        font-weight: bold;
        color: #6AA338;
        margin-bottom: 5px;
    }}

    .tagline {{
        margin-top: 10px;
        font-weight: bold;
        color: #6AA338;
    }}
</style>
</head>
<body>
    <div class="header">
        <div class="business-name">{name}</div>
        {business_type}
    </div>

    {hero_image}

    <table class="contact-block">
        <tr>
            <td class="contact-cell">
                <div class="contact-section">
                    <div class="contact-heading">Contact Information</div>
                    {contact_items}
                </div>
            </td>
            <td class="qr-cell">
                <div class="qr-section">
                    {qr_block}
                    <div><strong>Location:</strong> {where}</div>
                </div>
            </td>
        </tr>
    </table>

    {_sections(record, options)}

    <div class="footer">
        <div class="website-url">{footer_url}</div>
        {updated}
        <div class="tagline">{options.brand_tagline}</div>
        <div>{options.footer_note}</div>
    </div>
</body>
</html>"""


def build_fallback_html(record: ListingRecord, page: PageConfig = PageConfig()) -> str:
    """Minimal sheet: name, contact fields and QR code only."""

    def value(text: str) -> str:
        return html.escape(text) if text else "Not specified"

    qr_image = ""
    if record.qr_code_data:
        qr_image = (
            f'<img src="{html.escape(record.qr_code_data)}" '
            'style="width: 100px; height: 100px;" alt="QR Code">'
        )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{html.escape(record.name)} - Listing</title>
<style>
    {page.css()}
    body {{ font-family: Arial, sans-serif; font-size: 12pt; }}
    .header {{ background-color: #004D43; color: white; padding: 15px; text-align: center; margin-bottom: 15px; }}
    .business-name {{ font-size: 18pt; font-weight: bold; margin-bottom: 10px; }}
    .contact {{ margin: 10px 0; }}
    .qr-section {{ text-align: center; margin: 15px 0; }}
</style>
</head>
<body>
    <div class="header"><h1>Eat Local First Directory</h1></div>
    <div class="business-name">{html.escape(record.name)}</div>
    <div class="contact">
        <strong>Address:</strong> {value(record.location or record.address)}<br>
        <strong>Email:</strong> {value(record.email)}<br>
        <strong>Phone:</strong> {value(record.phone)}<br>
        <strong>Website:</strong> {value(record.website)}
    </div>
    <div class="qr-section">
        <p><strong>Visit Online:</strong></p>
        {qr_image}
    </div>
    <div style="margin-top: 20px; font-size: 10pt; text-align: center;">
        Generated from Eat Local First &bull; Updated: {value(record.updated_at)}
    </div>
</body>
</html>"""


def render_listing(
    record: ListingRecord,
    options: TemplateOptions = TemplateOptions(),
    page: PageConfig = PageConfig(),
) -> RenderResult:
    try:
        markup = build_listing_html(record, options, page)
    except Exception as e:
        logger.exception("Listing template failed for {}", record.id)
        return RenderResult(error=f"listing template failed: {e}")
    if not markup.strip():
        return RenderResult(error="listing template produced no output")
    return RenderResult(html=markup)


def render_fallback(record: ListingRecord, page: PageConfig = PageConfig()) -> RenderResult:
    try:
        markup = build_fallback_html(record, page)
    except Exception as e:
        logger.exception("Fallback template failed for {}", record.id)
        return RenderResult(error=f"fallback template failed: {e}")
    return RenderResult(html=markup)


def html_to_pdf(html_content: str, base_url: str | None = None) -> bytes:
    """Convert an HTML document to PDF bytes with WeasyPrint."""
    try:
        # Lazy import: WeasyPrint loads Pango/cairo on import.
        from weasyprint import HTML

        pdf = HTML(string=html_content, base_url=base_url).write_pdf()
    except Exception as e:
        raise PdfRenderError(f"WeasyPrint failed: {e}") from e
    if not pdf:
        raise PdfRenderError("WeasyPrint returned an empty document")
    return pdf
