"""Email templates for Gulfquotes.

HTML templates following the Gulfquotes visual identity:
- Primary: #0F766E
- Dark: #134E4A
- Background: #F8FAFC
- Card: #FFFFFF
- Text: #0F172A
- Muted: #64748B
- Border: #E2E8F0
"""

from datetime import datetime
from html import escape


# ==============================================================================
# Base Template
# ==============================================================================

BASE_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - Gulfquotes</title>
  <style>
    @media only screen and (max-width: 620px) {{
      .container {{
        width: 100% !important;
        padding: 20px 10px !important;
      }}
      .content-padding {{
        padding: 24px 20px !important;
      }}
    }}
  </style>
</head>
<body style="margin: 0; padding: 0; background-color: #F8FAFC; font-family: Georgia, 'Times New Roman', serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color: #F8FAFC;">
    <tr>
      <td align="center" style="padding: 40px 20px;" class="container">
        <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background-color: #FFFFFF; border-radius: 12px; max-width: 600px;">
          <tr>
            <td style="padding: 32px 40px 24px; text-align: center; border-bottom: 1px solid #E2E8F0;">
              <h1 style="margin: 0; font-size: 28px; font-weight: 700; color: #0F766E;">
                Gulfquotes
              </h1>
            </td>
          </tr>
          <tr>
            <td style="padding: 40px;" class="content-padding">
              {content}
            </td>
          </tr>
          <tr>
            <td style="padding: 24px 40px; background-color: #F8FAFC; border-top: 1px solid #E2E8F0; border-radius: 0 0 12px 12px;">
              <p style="margin: 0; font-size: 12px; color: #64748B; text-align: center; line-height: 1.6;">
                &copy; {year} Gulfquotes.<br>
                You receive this email because you follow this author.
                Manage your notification preferences in your profile.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


# ==============================================================================
# Template: New Quote
# ==============================================================================

NEW_QUOTE_CONTENT = """
<h2 style="margin: 0 0 16px; font-size: 22px; font-weight: 600; color: #0F172A; line-height: 1.3;">
  New quote from {author_name}
</h2>

<p style="margin: 0 0 24px; font-size: 16px; color: #334155; line-height: 1.6;">
  Hello, <strong>{user_name}</strong>! An author you follow has just posted a new quote.
</p>

<blockquote style="margin: 24px 0; padding: 16px 24px; border-left: 4px solid #0F766E; background-color: #F0FDFA; font-size: 18px; font-style: italic; color: #134E4A;">
  {quote_content}
</blockquote>

<p style="text-align: center; margin: 32px 0 16px;">
  <a href="{quote_url}" style="display: inline-block; background-color: #0F766E; color: #FFFFFF; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: 600;">
    Read the quote
  </a>
</p>

<p style="margin: 0; font-size: 14px; color: #64748B; text-align: center;">
  <a href="{author_url}" style="color: #0F766E;">More from {author_name}</a>
</p>
"""


def quote_url(site_url: str, quote_slug: str) -> str:
    return f"{site_url.rstrip('/')}/quotes/{quote_slug}"


def author_url(site_url: str, author_slug: str) -> str:
    return f"{site_url.rstrip('/')}/authors/{author_slug}"


def render_new_quote(
    user_name: str,
    author_name: str,
    author_slug: str,
    quote_slug: str,
    quote_content: str,
    site_url: str,
) -> tuple[str, str]:
    """Render the new quote notification email.

    Args:
        user_name: Recipient display name
        author_name: Author profile name
        author_slug: Author profile slug, used for the author link
        quote_slug: Quote slug, used for the quote link
        quote_content: Quote text
        site_url: Public site base URL

    Returns:
        Tuple of (html_content, plain_text_content)
    """
    link_quote = quote_url(site_url, quote_slug)
    link_author = author_url(site_url, author_slug)

    content = NEW_QUOTE_CONTENT.format(
        user_name=escape(user_name),
        author_name=escape(author_name),
        quote_content=escape(quote_content),
        quote_url=escape(link_quote, quote=True),
        author_url=escape(link_author, quote=True),
    )
    html = BASE_TEMPLATE.format(
        title=f"New quote from {escape(author_name)}",
        content=content,
        year=datetime.now().year,
    )

    plain_text = f"""
New quote from {author_name} - Gulfquotes

Hello, {user_name}!

An author you follow has just posted a new quote:

"{quote_content}"

Read the quote: {link_quote}
More from {author_name}: {link_author}
"""

    return html, plain_text
