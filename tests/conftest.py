# tests/conftest.py
import pytest

from auditor.dom.builder import DOMBuilder

# A page that satisfies every signal of every rule.
FULL_PAGE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Acme Store - Home</title>
  <meta name="description" content="Hand-made widgets, shipped worldwide.">
  <meta name="robots" content="index, follow">
  <meta name="mcp-server" content="https://acme.example/mcp">
  <link rel="canonical" href="https://acme.example/">
  <meta property="og:title" content="Acme Store">
  <meta property="og:description" content="Hand-made widgets">
  <meta property="og:image" content="https://acme.example/og.png">
  <script type="application/ld+json">{"@context": "https://schema.org", "@type": "Store", "name": "Acme"}</script>
  <script>navigator.modelContext.registerTool({name: "search"});</script>
</head>
<body>
  <header>
    <nav>
      <a href="/" aria-label="Home" data-testid="nav-home">Home</a>
    </nav>
  </header>
  <main>
    <section>
      <h1>Acme widgets</h1>
      <article>
        <h2>Featured</h2>
        <figure>
          <img src="/w.png" alt="A widget">
          <figcaption>Our best widget</figcaption>
        </figure>
      </article>
      <form>
        <label for="q">Search</label>
        <input id="q" type="search" aria-label="Search" data-testid="search-input">
        <button type="submit" aria-label="Search" data-testid="search-submit">Go</button>
      </form>
    </section>
  </main>
  <footer><p>Acme Ltd.</p></footer>
</body>
</html>
"""


@pytest.fixture
def parse():
    """Parses a markup string into an HTMLDocument."""
    builder = DOMBuilder()

    def _parse(html: str, url: str = "https://example.com/"):
        return builder.parse_doc(url, html)

    return _parse


@pytest.fixture
def full_page_html() -> str:
    return FULL_PAGE_HTML


@pytest.fixture
def full_page(parse, full_page_html):
    return parse(full_page_html)
