import pytest


ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Understanding Tide Pools Along The Coast | Shore Notes</title>
  <meta property="og:title" content="Understanding Tide Pools">
  <meta name="description" content="A field guide to tide pools.">
  <meta name="author" content="Jane Doe">
  <meta property="article:published_time" content="2024-05-01T10:00:00Z">
  <meta property="og:image" content="https://example.com/pool.jpg">
  <meta property="og:site_name" content="Shore Notes">
</head>
<body>
  <nav class="menu"><a href="/">Home</a> <a href="/about">About</a></nav>
  <div id="main">
    <article class="post-content">
      <h1>Understanding Tide Pools</h1>
      <p>Tide pools form where the retreating sea leaves water trapped among rocks, and they
      host a surprising range of life. Anemones, sea stars, hermit crabs, and small fish all
      share these shallow basins, surviving heat, wind, and changing salinity between tides.</p>
      <p>Visitors who arrive at low tide can see most of the residents, although many hide under
      ledges or inside crevices during the day. The <a href="/species">species list</a> we keep
      is updated every season, with notes on where each animal was found and how common it was.</p>
      <figure>
        <img src="/images/anemone.jpg" alt="Anemone">
        <figcaption class="caption credit-line">Photo by the author</figcaption>
      </figure>
      <p>Walking carefully matters, because the algae covering the rocks is slippery and many
      animals are easily crushed. Stepping on bare rock, avoiding loose stones, and never
      prying creatures from their places keeps both people and pools safe.<script>trackReading();</script></p>
      <p>Finally, remember that pools change with every tide, so a second visit a few hours later
      can reveal animals that were hidden before. Patience, good boots, and a small notebook are
      all you need to start observing. <a href="javascript:void(0)">Read aloud</a></p>
    </article>
  </div>
  <aside class="sidebar"><p>Subscribe to our newsletter for more, and follow us everywhere.</p></aside>
  <footer class="site-footer">Copyright 2024 Shore Notes</footer>
</body>
</html>
"""

SPA_HTML = """<!DOCTYPE html>
<html>
<head><title>Dashboard</title></head>
<body>
  <div id="root"></div>
  <noscript>You need to enable JavaScript to run this app.</noscript>
  <script src="/static/bundle.js"></script>
</body>
</html>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <id>urn:example:feed</id>
  <updated>2024-03-02T00:00:00Z</updated>
  <entry>
    <title>First Post!</title>
    <link href="https://example.com/posts/1"/>
    <id>urn:example:1</id>
    <updated>2024-03-01T12:00:00Z</updated>
    <author><name>Ada</name></author>
    <summary>The first summary.</summary>
  </entry>
  <entry>
    <link href="https://example.com/posts/2"/>
    <id>urn:example:2</id>
    <updated>2024-03-02T12:00:00Z</updated>
    <summary>No title here.</summary>
  </entry>
</feed>
"""

RSS_FEED = """<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0">
  <channel>
    <title>Example RSS</title>
    <link>https://example.com/</link>
    <description>Example channel</description>
    <item>
      <title>Linked Item</title>
      <link>https://example.com/items/1</link>
      <description>Linked description</description>
      <pubDate>Tue, 10 Jun 2003 04:00:00 GMT</pubDate>
      <author>editor@example.com (Editor)</author>
    </item>
    <item>
      <title>Guid Item</title>
      <guid isPermaLink="false">item-2-guid</guid>
      <description>Guid description</description>
      <pubDate>not a date</pubDate>
    </item>
    <item>
      <description>Untitled item is dropped</description>
      <link>https://example.com/items/3</link>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def article_html():
    return ARTICLE_HTML


@pytest.fixture
def spa_html():
    return SPA_HTML


@pytest.fixture
def atom_feed():
    return ATOM_FEED


@pytest.fixture
def rss_feed():
    return RSS_FEED
