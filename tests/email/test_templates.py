"""Tests for the new quote email template."""

from gulfquotes.email.templates import author_url, quote_url, render_new_quote


def render(**overrides):
    fields = {
        "user_name": "Ana",
        "author_name": "Rumi",
        "author_slug": "rumi",
        "quote_slug": "what-you-seek-is-seeking-you",
        "quote_content": "What you seek is seeking you.",
        "site_url": "https://gulfquotes.com",
    }
    fields.update(overrides)
    return render_new_quote(**fields)


class TestNewQuoteTemplate:
    """Tests for render_new_quote."""

    def test_renders_html_and_text(self) -> None:
        html, text = render()

        assert "New quote from Rumi" in html
        assert "What you seek is seeking you." in html
        assert "Hello, Ana!" in text
        assert '"What you seek is seeking you."' in text

    def test_links(self) -> None:
        html, text = render()

        assert 'href="https://gulfquotes.com/quotes/what-you-seek-is-seeking-you"' in html
        assert 'href="https://gulfquotes.com/authors/rumi"' in html
        assert "Read the quote: https://gulfquotes.com/quotes/what-you-seek-is-seeking-you" in text
        assert "More from Rumi: https://gulfquotes.com/authors/rumi" in text

    def test_trailing_slash_in_site_url(self) -> None:
        assert quote_url("https://gulfquotes.com/", "a") == "https://gulfquotes.com/quotes/a"
        assert author_url("https://gulfquotes.com/", "b") == "https://gulfquotes.com/authors/b"

    def test_html_is_escaped(self) -> None:
        html, text = render(
            user_name="<b>Eve</b>",
            quote_content='Say "no" to <script>alert(1)</script>',
        )

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;Eve&lt;/b&gt;" in html
        # Plain text is sent as-is
        assert "<script>" in text
