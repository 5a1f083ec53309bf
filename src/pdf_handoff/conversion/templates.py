"""
Template style presets and their injection into caller markup.

Template kinds are looked up exactly (case sensitive). Unknown kinds get
no extra styling rather than an error.
"""

DEFAULT_TEMPLATE = "classic"

HEAD_CLOSE = "</head>"

TEMPLATE_STYLES: dict[str, str] = {
    "classic": """
        .template-classic .resume h1{font-family: "Georgia", "Times New Roman", serif;}
        .template-classic .resume h2{font-family: "Georgia", "Times New Roman", serif;}
    """,
    "modern": """
        .template-modern .resume h1{letter-spacing:.3px;}
        .template-modern .resume .section h2{border-bottom:2px solid #111827;}
        .template-modern .resume .item .top{color:#0f172a;}
        .template-modern .resume {padding-top: 25mm !important;}
        .template-modern .accent{height:6px; background:#111827; margin:-22mm -22mm 16px; border-radius:10px 10px 0 0;}
    """,
    "minimal": """
        .template-minimal .resume .section h2{border:none; background:#f3f4f6; padding:6px 8px; border-radius:6px;}
    """,
}


def resolve_template(template: str | None) -> str:
    """Return the template kind to use; missing or empty means the default."""
    if not template:
        return DEFAULT_TEMPLATE
    return template


def style_for(template: str) -> str:
    return TEMPLATE_STYLES.get(template, "")


def inject_style(html: str, css: str) -> str:
    """Insert css as a <style> block right before the first </head>.

    Markup without a closing head tag, or an empty css, is returned as is.
    """
    if not css or HEAD_CLOSE not in html:
        return html
    style_tag = f'<style id="template-injection">{css}</style>'
    return html.replace(HEAD_CLOSE, f"{style_tag}\n{HEAD_CLOSE}", 1)
